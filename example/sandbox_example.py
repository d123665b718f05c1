import asyncio
from types import SimpleNamespace

from pseudo_wallet import PseudoSandbox, PromptConsentSurface, load_settings
from pseudo_wallet.engine.events import RequestInterceptedEvent, SandboxHandledEvent, RequestRejectedEvent
from pseudo_wallet.servers import ConsentServer


class DemoEthereumProvider:
    """Stands in for an injected wallet; every call that reaches it is 'real'."""
    selectedAddress = None

    async def request(self, args):
        print(f"🔌 Real wallet received {args['method']}")
        return "0xreal"

    def isConnected(self):
        return True

    def emit(self, event, payload=None):
        print(f"📣 Provider event {event}: {payload}")


window = SimpleNamespace(ethereum=DemoEthereumProvider())
settings = load_settings()

# ✨ Requests wait on this surface until /pending/approve or /pending/reject is called
surface = PromptConsentSurface(use_sandbox=settings.sandbox_default)
sandbox = PseudoSandbox.from_settings(window, surface=surface, settings=settings)
app = ConsentServer(surface, hub=sandbox.hub, title="Pseudo Wallet Consent")


async def on_intercepted(event, deps):
    print(f"🛑 Waiting for consent: {event.method} {event.params}")

async def on_sandbox(event, deps):
    print(f"✅ Sandbox answered {event.method} (wallet {event.address})")

async def on_rejected(event, deps):
    print(f"❌ Rejected {event.method}: {event.reason}")

sandbox.event_bus.hook(RequestInterceptedEvent, on_intercepted)
sandbox.event_bus.hook(SandboxHandledEvent, on_sandbox)
sandbox.event_bus.hook(RequestRejectedEvent, on_rejected)


async def dapp():
    """Behaves like a page script once the provider is wrapped."""
    await asyncio.sleep(0.5)
    try:
        accounts = await window.ethereum.request({"method": "eth_requestAccounts"})
        signature = await window.ethereum.request({"method": "personal_sign", "params": ["hello", accounts[0]]})
        print(f"🖊️  personal_sign -> {signature}")
    except Exception as e:
        print(f"dApp call failed: {e}")


@app.on_event("startup")
async def start_sandbox():
    sandbox.start()
    asyncio.get_running_loop().create_task(dapp())


if __name__ == "__main__":
    # curl localhost:8000/pending
    # curl -X POST localhost:8000/pending/approve -H 'content-type: application/json' -d '{"use_sandbox": true}'
    import uvicorn
    uvicorn.run(app, host="localhost", port=8000)
