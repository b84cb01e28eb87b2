import os
import sys
import tempfile
from pathlib import Path

# Ensure the repo root is on sys.path when running as a script.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from impersonate import ImpersonationEngine
from passstore import FileBackend, save_if_changed
from passstore.tree import ls, show


def main() -> int:
    tmp_path = os.path.join(tempfile.gettempdir(), f"imposter-pass-demo-{os.getpid()}.json")

    # ===== Store (all operations) =====
    backend = FileBackend(tmp_path)
    print("[store] path:", backend.get_path())
    original = backend.load()
    store = original.copy()
    store.upsert("email/work").set("hunter2\nuser: me@example.com")
    store.upsert("email/home").set("correct horse")
    store.upsert("bank").set("1234")
    print("[store] changed:", store != original)
    print("[store] saved:", save_if_changed(backend, original, store))
    print("[store] match email:", store.match("email"))
    print("[store] entry meta:", store.entry("email/work").meta)

    # ===== Tree rendering =====
    ls(store)
    show(store, "email")
    show(store, "bank")
    print()

    # ===== Impersonation (child adds an entry through the session store) =====
    code = (
        "import json, os\n"
        "path = os.environ['IMPOSTER_PASS_SESSION_STORE']\n"
        "data = json.load(open(path))\n"
        "data['from/child'] = 'hello'\n"
        "json.dump(data, open(path, 'w'))\n"
    )
    engine = ImpersonationEngine(real_command=[sys.executable, __file__], quiet=True)
    result = engine.run(sys.executable, ["-c", code], backend.load())
    print("[impersonate] status:", result.returncode)
    print("[impersonate] new keys:", [key.text for key in result.store])
    save_if_changed(backend, store, result.store)
    print("[impersonate] on disk:", FileBackend(tmp_path).load() == result.store)

    os.remove(tmp_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
