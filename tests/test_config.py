from lottery_settlement.config import DEFAULT_STATE_FILE, Settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOTTERY_STATE_FILE", raising=False)
    monkeypatch.delenv("LOTTERY_RPC_URL", raising=False)
    settings = Settings.from_env()
    assert settings.state_file == DEFAULT_STATE_FILE
    assert settings.rpc_url is None


def test_env_and_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOTTERY_STATE_FILE", "from-env.json")
    monkeypatch.setenv("LOTTERY_RPC_URL", " https://rpc.example ")
    assert Settings.from_env() == Settings("from-env.json", "https://rpc.example")
    assert Settings.from_env("cli.json", "https://other").state_file == "cli.json"
