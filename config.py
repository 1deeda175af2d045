import copy, json, os, sys
from typing import Any, Dict, Tuple

from folders import LogFolders

AUTO = "auto"
DEFAULT_CONFIG = {
    'folders': {'primary': AUTO, 'secondary': AUTO, 'custom': ''},
    'poll_delay': 0.5,
    'folder_check': 30.0,
    'start_at_end': True,
    'settings_file': 'GorgonSettings.txt',
}


def merge_defaults(data, defaults=DEFAULT_CONFIG):
    """Copy of `data` with every key missing from it taken from `defaults`.

    Values whose default is a number or a bool are coerced to that type,
    so a hand-edited "0.25" still works as a poll delay.
    """
    out = copy.deepcopy(defaults)
    for k, v in (data or {}).items():
        d = defaults.get(k)
        if isinstance(d, dict) and isinstance(v, dict):
            out[k] = merge_defaults(v, d)
        elif isinstance(d, bool):
            out[k] = v if isinstance(v, bool) else str(v).lower() in ('1', 'true', 'yes', 'on')
        elif isinstance(d, (int, float)) and not isinstance(v, bool):
            try:
                out[k] = type(d)(v)
            except (TypeError, ValueError):
                pass
        else:
            out[k] = v
    return out


def load_config(path='config.json'):
    if not os.path.isfile(path):
        conf = copy.deepcopy(DEFAULT_CONFIG)
        save_config(conf, path)
        return conf
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f'{path}: expected a JSON object, got {type(data).__name__}')
    return merge_defaults(data)


def save_config(conf, path='config.json'):
    os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
    tmp = path + '.tmp'
    with open(tmp, 'w', encoding='utf-8') as f:
        json.dump(conf, f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)


def default_roots(platform: str = sys.platform, env=None) -> Tuple[str, str]:
    env = os.environ if env is None else env
    home = os.path.expanduser('~')
    if platform.startswith('win'):
        local = env.get('LOCALAPPDATA') or os.path.join(home, 'AppData', 'Local')
        low = os.path.join(os.path.dirname(local), 'LocalLow')
        return os.path.join(local, 'ProjectGorgon'), os.path.join(low, 'Elder Game', 'Project Gorgon')
    data = env.get('XDG_DATA_HOME') or os.path.join(home, '.local', 'share')
    unity = env.get('XDG_CONFIG_HOME') or os.path.join(home, '.config')
    return os.path.join(data, 'ProjectGorgon'), os.path.join(unity, 'unity3d', 'Elder Game', 'Project Gorgon')


def resolve_folders(conf: Dict[str, Any], platform: str = sys.platform, env=None) -> Tuple[LogFolders, LogFolders]:
    auto_primary, auto_secondary = default_roots(platform, env)
    f = conf.get('folders', {})
    primary = str(f.get('primary') or AUTO)
    secondary = str(f.get('secondary') or AUTO)
    return (
        LogFolders.under(auto_primary if primary == AUTO else os.path.expanduser(primary)),
        LogFolders.under(auto_secondary if secondary == AUTO else os.path.expanduser(secondary)),
    )
