"""
Tests for the sandbox dispatchers and DispatcherHub.
"""
import json

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from nacl.signing import VerifyKey

from pseudo_wallet.adapters import DispatcherHub, InMemoryStorage, KeypairStore
from pseudo_wallet.adapters.evm import EVMDispatcher, EthereumMethod, keypair_from_private_key, verify_typed_data_signature
from pseudo_wallet.adapters.svm import (
    ConnectResult,
    SendResult,
    SignedMessage,
    SignedSolanaTransaction,
    SolanaPublicKey,
    SVMDispatcher,
    transaction_message,
)
from pseudo_wallet.engine.exceptions import UnsupportedMethodError

from test_signers import COW_ADDRESS, COW_PRIVATE_KEY, MAIL_SIGNATURE, MAIL_TYPED_DATA


def cow_hub() -> DispatcherHub:
    record = KeypairStore.encode_record(keypair_from_private_key(COW_PRIVATE_KEY))
    return DispatcherHub(KeypairStore(InMemoryStorage({"pseudo_ethereum_keypair": record})), eth_chain_id="0x5")


class SerializeMessageCamel:
    def serializeMessage(self):
        return b"camel"


class WithMessage:
    class message:
        @staticmethod
        def serialize():
            return b"nested"


# ==================== Ethereum ====================

@pytest.mark.asyncio
async def test_unknown_method_names_the_method():
    hub = cow_hub()
    with pytest.raises(UnsupportedMethodError) as excinfo:
        await hub.dispatch("ethereum", "eth_getBalance", [COW_ADDRESS])
    assert excinfo.value.method == "eth_getBalance"
    assert "eth_getBalance" in str(excinfo.value)

    with pytest.raises(UnsupportedMethodError):
        await hub.dispatch("solana", "signIn", [])
    with pytest.raises(UnsupportedMethodError):
        hub.get_dispatcher("bitcoin")


@pytest.mark.asyncio
async def test_request_accounts_carries_connection_update():
    result = await cow_hub().dispatch("ethereum", "eth_requestAccounts")
    assert result.value == [COW_ADDRESS]
    assert result.connection.address == COW_ADDRESS
    assert result.connection.event == "connect"
    assert result.connection.payload == {"chainId": "0x5"}

    accounts = await cow_hub().dispatch("ethereum", "eth_accounts")
    assert accounts.value == [COW_ADDRESS]
    assert accounts.connection is None


@pytest.mark.asyncio
async def test_request_permissions_shape():
    result = await cow_hub().dispatch("ethereum", "wallet_requestPermissions", [{"eth_accounts": {}}])
    assert result.value == [{
        "parentCapability": "eth_accounts",
        "caveats": [{"type": "restrictReturnedAccounts", "value": [COW_ADDRESS]}],
    }]


@pytest.mark.asyncio
async def test_personal_sign_and_eth_sign_parameter_order():
    hub = cow_hub()
    personal = await hub.dispatch("ethereum", "personal_sign", ["hello", COW_ADDRESS])
    eth_sign = await hub.dispatch("ethereum", "eth_sign", [COW_ADDRESS, "hello"])

    assert personal.value == eth_sign.value
    assert Account.recover_message(encode_defunct(text="hello"), signature=personal.value) == COW_ADDRESS


@pytest.mark.asyncio
async def test_personal_sign_accepts_serialized_byte_array():
    hub = cow_hub()
    from_array = await hub.dispatch("ethereum", "personal_sign", [[104, 105], COW_ADDRESS])
    from_text = await hub.dispatch("ethereum", "personal_sign", ["hi", COW_ADDRESS])
    assert from_array.value == from_text.value

    with pytest.raises(ValueError):
        await hub.dispatch("ethereum", "personal_sign", [[104, 999], COW_ADDRESS])


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["eth_signTypedData", "eth_signTypedData_v3", "eth_signTypedData_v4"])
async def test_typed_data_methods_sign_mail_vector(method):
    hub = cow_hub()
    as_json = await hub.dispatch("ethereum", method, [COW_ADDRESS, json.dumps(MAIL_TYPED_DATA)])
    legacy = await hub.dispatch("ethereum", method, [MAIL_TYPED_DATA, COW_ADDRESS])

    assert as_json.value == MAIL_SIGNATURE
    assert legacy.value == MAIL_SIGNATURE
    assert verify_typed_data_signature(MAIL_TYPED_DATA, as_json.value, COW_ADDRESS)


@pytest.mark.asyncio
async def test_transaction_methods_return_hash_placeholders():
    hub = cow_hub()
    sent = await hub.dispatch("ethereum", "eth_sendTransaction", [{"to": COW_ADDRESS, "value": "0x1"}])
    signed = await hub.dispatch("ethereum", "eth_signTransaction", [{}])
    assert sent.value.startswith("0x") and len(sent.value) == 66
    assert sent.value != signed.value


def test_every_method_has_a_handler():
    dispatcher = EVMDispatcher(KeypairStore())
    assert all(dispatcher.supports(m.value) for m in EthereumMethod)
    assert not dispatcher.supports("eth_chainId")


def test_incomplete_handler_table_fails_construction():
    class Partial(EVMDispatcher):
        def handlers(self):
            return {EthereumMethod.ACCOUNTS: self._accounts}

    with pytest.raises(TypeError):
        Partial(KeypairStore())


# ==================== Solana ====================

@pytest.mark.asyncio
async def test_solana_connect_returns_public_key():
    hub = DispatcherHub(KeypairStore())
    result = await hub.dispatch("solana", "connect", [{"onlyIfTrusted": False}])
    keypair = await hub.get_keypair("solana")

    assert isinstance(result.value, ConnectResult)
    key = result.value.public_key
    assert isinstance(key, SolanaPublicKey)
    assert key.to_base58() == keypair.address
    assert key.to_string() == str(key) == key.to_json() == keypair.address
    assert key.to_bytes() == keypair.public_key
    assert key.equals(keypair.address)
    assert key == SolanaPublicKey.from_base58(keypair.address)
    assert result.connection.public_key == key
    assert result.connection.payload == key

    buffer = key.to_buffer()
    assert buffer.readonly
    assert bytes(buffer) == keypair.public_key


@pytest.mark.asyncio
async def test_solana_sign_message_accepts_text_and_bytes():
    hub = DispatcherHub(KeypairStore())
    keypair = await hub.get_keypair("solana")
    from_text = await hub.dispatch("solana", "signMessage", ["gm"])
    from_bytes = await hub.dispatch("solana", "signMessage", [b"gm", "utf8"])

    assert isinstance(from_text.value, SignedMessage)
    assert from_text.value.signature == from_bytes.value.signature
    assert from_text.value.public_key.to_base58() == keypair.address
    VerifyKey(keypair.public_key).verify(b"gm", from_text.value.signature)


@pytest.mark.asyncio
async def test_solana_sign_transactions():
    hub = DispatcherHub(KeypairStore())
    keypair = await hub.get_keypair("solana")
    txs = [SerializeMessageCamel(), WithMessage(), b"raw", object()]

    single = await hub.dispatch("solana", "signTransaction", [txs[0]])
    assert isinstance(single.value, SignedSolanaTransaction)
    assert single.value.transaction is txs[0]
    assert single.value.signatures[0].public_key.to_base58() == keypair.address
    VerifyKey(keypair.public_key).verify(b"camel", single.value.signature)

    batch = await hub.dispatch("solana", "signAllTransactions", [txs])
    assert [s.transaction for s in batch.value] == txs
    for tx, signed in zip(txs, batch.value):
        VerifyKey(keypair.public_key).verify(transaction_message(tx), signed.signature)
    assert transaction_message(object()) == bytes(32)


@pytest.mark.asyncio
async def test_solana_sign_and_send_placeholder():
    result = await DispatcherHub(KeypairStore()).dispatch("solana", "signAndSendTransaction", [b"tx"])
    assert isinstance(result.value, SendResult)
    assert len(result.value.signature) == 88


@pytest.mark.asyncio
async def test_hub_addresses():
    hub = DispatcherHub(KeypairStore())
    addresses = await hub.addresses()
    assert set(addresses) == {"ethereum", "solana"}
    assert addresses["ethereum"].startswith("0x")
    assert isinstance(hub.get_dispatcher("solana"), SVMDispatcher)
