"""
Tests for environment-driven settings and the composition root.
"""
import pytest

from pseudo_wallet.config import DEFAULT_DISCOVERY_DELAYS_MS, Settings, load_settings
from pseudo_wallet.engine.consent import PromptConsentSurface, StaticConsentSurface
from pseudo_wallet.engine.exceptions import ConfigurationError
from pseudo_wallet.sandbox import PseudoSandbox
from pseudo_wallet.schemas.bases import Decision


def test_defaults_from_empty_environment():
    settings = load_settings({})
    assert settings.storage_path is None
    assert settings.sandbox_default is False
    assert settings.log_level == "INFO"
    assert settings.discovery_delays_ms == DEFAULT_DISCOVERY_DELAYS_MS == (0, 10, 25, 50, 100, 150, 200, 300, 500, 1000, 2000)
    assert settings.eth_chain_id == "0x1"


def test_values_are_parsed():
    settings = load_settings({
        "PSEUDO_STORAGE_PATH": "/tmp/keys.json",
        "PSEUDO_SANDBOX_DEFAULT": "yes",
        "PSEUDO_LOG_LEVEL": "debug",
        "PSEUDO_DISCOVERY_DELAYS_MS": "0, 100,1000",
        "PSEUDO_ETH_CHAIN_ID": "11155111",
    })
    assert settings.storage_path == "/tmp/keys.json"
    assert settings.sandbox_default is True
    assert settings.log_level == "DEBUG"
    assert settings.discovery_delays_ms == (0, 100, 1000)
    assert settings.eth_chain_id == "0xaa36a7"
    assert load_settings({"PSEUDO_ETH_CHAIN_ID": "0x89"}).eth_chain_id == "0x89"


@pytest.mark.parametrize("name, value", [
    ("PSEUDO_SANDBOX_DEFAULT", "maybe"),
    ("PSEUDO_LOG_LEVEL", "LOUD"),
    ("PSEUDO_DISCOVERY_DELAYS_MS", "0,soon"),
    ("PSEUDO_DISCOVERY_DELAYS_MS", "-5"),
    ("PSEUDO_ETH_CHAIN_ID", "mainnet"),
])
def test_invalid_values_raise(name, value):
    with pytest.raises(ConfigurationError):
        load_settings({name: value})


def test_from_settings_uses_prompt_surface_toggle():
    sandbox = PseudoSandbox.from_settings({}, settings=Settings(sandbox_default=True))
    assert isinstance(sandbox.surface, PromptConsentSurface)
    assert sandbox.surface.use_sandbox is True


@pytest.mark.asyncio
async def test_sandbox_identity_survives_sessions(tmp_path):
    class Provider:
        publicKey = None
        isConnected = False

        async def connect(self):
            return "real"

    settings = Settings(storage_path=str(tmp_path / "keys.json"), discovery_delays_ms=(0,))
    addresses = []
    for _ in range(2):
        provider = Provider()
        sandbox = PseudoSandbox.from_settings(
            {"solana": provider},
            surface=StaticConsentSurface(Decision.sandbox()),
            settings=settings,
        )
        assert await sandbox.discover() == [("window.solana", "connect")]
        await provider.connect()
        addresses.append(provider.publicKey.to_base58())
        sandbox.stop()

    assert addresses[0] == addresses[1]
