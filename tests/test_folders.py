import os
from datetime import date

from folders import LogFolders, log_file_name, select_folder
from tests.helpers import touch

DAY = date(2024, 3, 5)


def test_log_file_name():
    assert log_file_name(DAY) == "Chat-24-03-05.log"
    assert log_file_name(date(2005, 1, 9)) == "Chat-05-01-09.log"


def test_log_folder_layout():
    f = LogFolders.under(os.path.join("base", "ProjectGorgon"))
    assert f.log_folder == os.path.join("base", "ProjectGorgon", "ChatLogs")
    assert f.file_for(DAY) == os.path.join("base", "ProjectGorgon", "ChatLogs", "Chat-24-03-05.log")


def test_only_existing_file_wins_either_order(roots):
    a, b = roots
    touch(a.file_for(DAY), "x", mtime=1_700_000_000)
    assert select_folder("", a, b, DAY).folders == a
    assert select_folder("", b, a, DAY).folders == a


def test_most_recent_wins(roots):
    a, b = roots
    touch(a.file_for(DAY), "x", mtime=1_700_000_000)
    touch(b.file_for(DAY), "x", mtime=1_700_000_100)
    src = select_folder("", a, b, DAY)
    assert src.folders == b
    assert src.path == b.file_for(DAY)
    assert src.root == b.root


def test_tie_goes_to_primary(roots):
    a, b = roots
    touch(a.file_for(DAY), "x", mtime=1_700_000_000)
    touch(b.file_for(DAY), "x", mtime=1_700_000_000)
    assert select_folder("", a, b, DAY).folders == a


def test_nothing_selected_without_files(roots):
    a, b = roots
    assert select_folder("", a, b, DAY) is None


def test_yesterdays_file_does_not_count(roots):
    a, b = roots
    touch(a.file_for(date(2024, 3, 4)), "x")
    assert select_folder("", a, b, DAY) is None


def test_custom_folder_always_wins(roots, tmp_path):
    a, b = roots
    touch(a.file_for(DAY), "x", mtime=1_700_000_100)
    custom = str(tmp_path / "Elsewhere" / "Logs")
    src = select_folder(custom, a, b, DAY)
    assert src.folders.log_folder == custom
    assert src.root == str(tmp_path / "Elsewhere")
    assert src.path == os.path.join(custom, "Chat-24-03-05.log")
