import io
import json
import os
import signal
import sys

import pytest

import pass_cli
from passstore.backends import FileBackend
from passstore.store import Store


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_dir):
    for name in list(os.environ):
        if name.startswith("IMPOSTER_PASS_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("IMPOSTER_PASS_TMPDIR", os.path.join(tmp_dir, "sessions"))


@pytest.fixture
def db(tmp_dir):
    path = os.path.join(tmp_dir, "store.json")
    FileBackend(path).save(Store({"a/b": "x", "a/c": "y", "d": "z\nuser: bob"}))
    return path


def run(db, *argv):
    return pass_cli.main(["--db", db, "-q", *argv])


def stored(db):
    with open(db, encoding="utf-8") as f:
        return json.load(f)


# ============================================================
# Read-only commands
# ============================================================

class TestListing:
    def test_ls(self, db, capsys):
        assert run(db, "ls") == 0
        assert capsys.readouterr().out == "Password Store\na\n\tb\n\tc\nd\n"

    def test_show_exact_entry(self, db, capsys):
        assert run(db, "show", "a/b") == 0
        assert capsys.readouterr().out == "x"

    def test_show_folder(self, db, capsys):
        assert run(db, "show", "a") == 0
        assert capsys.readouterr().out == "a\n\tb\n\tc\n"

    def test_show_missing(self, db, capsys):
        assert run(db, "show", "nope") == 1
        assert "nope is not in the password store" in capsys.readouterr().err

    def test_show_traversal_rejected(self, db, capsys):
        assert run(db, "show", "../etc/passwd") == 1
        assert "invalid path" in capsys.readouterr().err

    def test_show_field_and_password(self, db, capsys):
        assert run(db, "show", "d", "--field", "user") == 0
        assert run(db, "show", "d", "--password") == 0
        assert capsys.readouterr().out == "bob\nz\n"

    @pytest.mark.parametrize("flag", [["--password"], ["--field", "user"]])
    def test_show_flag_requires_name(self, db, capsys, flag):
        with pytest.raises(SystemExit) as exc:
            run(db, "show", *flag)
        assert exc.value.code == 2
        assert "need a pass-name" in capsys.readouterr().err

    def test_dump_db(self, db, capsys):
        assert run(db, "dump-db") == 0
        assert json.loads(capsys.readouterr().out) == stored(db)

    def test_read_does_not_rewrite(self, db):
        mtime = os.stat(db).st_mtime_ns
        run(db, "ls")
        assert os.stat(db).st_mtime_ns == mtime

    def test_missing_store_not_created(self, tmp_dir, capsys):
        path = os.path.join(tmp_dir, "absent.json")
        assert run(path, "ls") == 0
        assert capsys.readouterr().out == "Password Store\n"
        assert not os.path.exists(path)


# ============================================================
# insert
# ============================================================

class TestInsert:
    def test_insert_echo(self, db, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("hunter2\n"))
        assert run(db, "insert", "-e", "email/work") == 0
        assert stored(db)["email/work"] == "hunter2"

    def test_insert_multiline(self, db, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("pw\nuser: me\n"))
        assert run(db, "insert", "-m", "multi") == 0
        assert stored(db)["multi"] == "pw\nuser: me\n"

    def test_insert_prompted(self, db, mocker):
        mocker.patch.object(pass_cli, "read_secret", side_effect=["s3cret", "s3cret"])
        assert run(db, "insert", "new") == 0
        assert stored(db)["new"] == "s3cret"

    def test_insert_mismatch(self, db, mocker, capsys):
        mocker.patch.object(pass_cli, "read_secret", side_effect=["one", "two"])
        assert run(db, "insert", "new") == 1
        assert "do not match" in capsys.readouterr().err
        assert "new" not in stored(db)

    def test_overwrite_declined(self, db, mocker):
        confirm = mocker.patch.object(pass_cli, "confirm", return_value=False)
        assert run(db, "insert", "-e", "a/b") == 0
        confirm.assert_called_once()
        assert stored(db)["a/b"] == "x"

    def test_overwrite_forced(self, db, mocker, monkeypatch):
        confirm = mocker.patch.object(pass_cli, "confirm")
        monkeypatch.setattr(sys, "stdin", io.StringIO("x2\n"))
        assert run(db, "insert", "-e", "-f", "a/b") == 0
        confirm.assert_not_called()
        assert stored(db)["a/b"] == "x2"

    def test_insert_traversal_rejected(self, db, capsys):
        assert run(db, "insert", "-e", "../../x") == 1
        assert "invalid path" in capsys.readouterr().err


# ============================================================
# rm
# ============================================================

class TestRemove:
    def test_rm_single(self, db):
        assert run(db, "rm", "-f", "d") == 0
        assert "d" not in stored(db)

    def test_rm_missing(self, db, capsys):
        assert run(db, "rm", "-f", "nope") == 1
        assert "is not in the password store" in capsys.readouterr().err

    def test_rm_folder_requires_recursive(self, db, capsys):
        assert run(db, "rm", "-f", "a") == 1
        assert "Is a directory" in capsys.readouterr().err
        assert "a/b" in stored(db)

    def test_rm_recursive(self, db):
        assert run(db, "rm", "-r", "-f", "a") == 0
        assert stored(db) == {"d": "z\nuser: bob"}

    def test_rm_declined(self, db, mocker):
        mocker.patch.object(pass_cli, "confirm", return_value=False)
        assert run(db, "rm", "d") == 0
        assert "d" in stored(db)


# ============================================================
# impersonate / non-persistent stores
# ============================================================

class TestImpersonate:
    def test_child_changes_saved(self, db, mocker):
        mocker.patch("impersonate.engine.current_command", return_value=[sys.executable])
        code = (
            "import json, os\n"
            "path = os.environ['IMPOSTER_PASS_SESSION_STORE']\n"
            "data = json.load(open(path))\n"
            "data['added'] = 'by child'\n"
            "json.dump(data, open(path, 'w'))\n"
        )
        assert run(db, "impersonate", sys.executable, "-c", code) == 0
        assert stored(db)["added"] == "by child"

    def test_child_status_propagated(self, db, mocker):
        mocker.patch("impersonate.engine.current_command", return_value=[sys.executable])
        before = stored(db)
        assert run(db, "impersonate", sys.executable, "-c", "raise SystemExit(4)") == 4
        assert stored(db) == before

    def test_signalled_child_exits_like_a_shell(self, db, mocker):
        mocker.patch("impersonate.engine.current_command", return_value=[sys.executable])
        code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
        assert run(db, "impersonate", sys.executable, "-c", code) == 128 + signal.SIGTERM

    def test_real_cli_behind_wrapper(self, tmp_dir, mocker):
        mocker.patch(
            "impersonate.engine.current_command",
            return_value=[sys.executable, os.path.abspath(pass_cli.__file__)],
        )
        db = os.path.join(tmp_dir, "real.json")
        FileBackend(db).save(Store({"x": "1"}))
        code = (
            "import subprocess\n"
            "subprocess.run(['pass', 'insert', '-e', 'y'], input='2\\n', text=True, check=True)\n"
        )
        assert run(db, "impersonate", sys.executable, "-c", code) == 0
        assert stored(db) == {"x": "1", "y": "2"}


class TestNonPersistent:
    def test_inline_store_changes_printed_not_saved(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO("v\n"))
        assert pass_cli.main(["--db", '{"a": "1"}', "insert", "-e", "b"]) == 0
        captured = capsys.readouterr()
        assert "WILL NOT BE SAVED" in captured.err
        assert json.loads(captured.out.split(": ", 1)[1]) == {"a": "1", "b": "v"}

    def test_env_db_used(self, db, monkeypatch, capsys):
        monkeypatch.setenv("IMPOSTER_PASS_DB", db)
        monkeypatch.setenv("IMPOSTER_PASS_QUIET", "true")
        assert pass_cli.main(["show", "a/b"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "x"
        assert captured.err == ""
