import json

from app.core.security import SESSION_STORAGE_KEY
from app.core.storage import InMemoryStorage
from scripts.manage_cli import main


def test_login_whoami_logout(capsys):
    storage = InMemoryStorage()
    assert main(["login", "--username", "manager", "--password", "manager123"], storage=storage) == 0

    record = json.loads(storage.get_item(SESSION_STORAGE_KEY))
    assert record["user"]["role"] == "manager"
    assert "expiresAt" in record

    assert main(["whoami"], storage=storage) == 0
    assert "Pedro Sergio Ivanov" in capsys.readouterr().out

    assert main(["can-access", "finance"], storage=storage) == 0
    assert main(["can-access", "settings"], storage=storage) == 1
    assert main(["has-permission", "admin", "technician"], storage=storage) == 0
    assert main(["has-permission", "admin"], storage=storage) == 1

    assert main(["logout"], storage=storage) == 0
    assert storage.get_item(SESSION_STORAGE_KEY) is None
    assert main(["whoami"], storage=storage) == 1

def test_login_wrong_password(capsys):
    storage = InMemoryStorage()
    assert main(["login", "--username", "admin", "--password", "bad"], storage=storage) == 1
    assert "incorrectos" in capsys.readouterr().out
    assert storage.get_item(SESSION_STORAGE_KEY) is None

def test_list_roles(capsys):
    assert main(["list-roles"], storage=InMemoryStorage()) == 0
    out = capsys.readouterr().out
    assert "receptionist" in out
    assert "Total: 4 roles." in out
