"""
Asynchronous C2B example.

Registers the confirmation/validation URLs of a shortcode, then simulates a
customer payment against it. Both calls run concurrently.

Usage:
    export MPESA_CONSUMER_KEY="..."
    export MPESA_CONSUMER_SECRET="..."
    python examples/async_c2b.py
"""

import asyncio

from mpesa_sdk import Config, MpesaAsyncClient, ResponseType
from mpesa_sdk.exceptions import MpesaError

SHORT_CODE = "600496"


async def main():
    config = Config.from_env(cache_token=True)

    async with MpesaAsyncClient(config) as client:
        try:
            register, simulate = await asyncio.gather(
                client.c2b_register(
                    validation_url="https://example.com/mpesa/validate",
                    confirmation_url="https://example.com/mpesa/confirm",
                    short_code=SHORT_CODE,
                    response_type=ResponseType.COMPLETED,
                ),
                client.c2b_simulate(
                    amount=1,
                    msisdn="254708374149",
                    short_code=SHORT_CODE,
                    bill_ref_number="INV-001",
                ),
            )
        except MpesaError as e:
            print(f"✗ Request failed: {e}")
            return

    print(f"Register: {register.response_description}")
    print(f"Simulate: {simulate.response_description}")


if __name__ == "__main__":
    asyncio.run(main())
