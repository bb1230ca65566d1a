#!/usr/bin/env python3
import asyncio

from dualmode import dual_mode, promisify, setup_logging


class Kv:
    def __init__(self):
        self.store = {}

    def get(self, key, callback):
        if key not in self.store:
            return callback(KeyError(key))
        return callback(None, self.store[key])

    def set(self, key, value, callback):
        self.store[key] = value
        return callback(None, True)


class Client:
    """Callback-only client; nested endpoints live at lower-cased attributes."""

    Kv = Kv

    def __init__(self):
        self.kv = Kv()

    def status(self, callback):
        return callback(None, "leader elected")


async def main() -> None:
    """Use the same operations in callback and future style."""
    client = Client()
    promisify(client)

    client.kv.set("greeting", "hello", lambda error, ok: print(f"callback set: {ok}"))
    print(f"future get: {await client.kv.get('greeting')}")
    print(f"future status: {await client.status()}")

    try:
        await client.kv.get("missing")
    except KeyError as exc:
        print(f"future rejected: {exc!r}")

    untouched = Client()
    proxy = dual_mode(untouched)
    await proxy.kv.set("greeting", "bonjour")
    print(f"proxy get: {await proxy.kv.get('greeting')}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
