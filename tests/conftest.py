import pytest

ENV_VARS = ("PRIVATE_KEY", "RPC_URL", "CONTRACT_ADDRESS", "CHAIN_ID", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's PYFAUCET_* variables out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(f"PYFAUCET_{name}", raising=False)
