"""
M-Pesa SDK Quickstart Example

Usage:
    export MPESA_CONSUMER_KEY="..."
    export MPESA_CONSUMER_SECRET="..."
    export MPESA_INITIATOR_PASSWORD="Safaricom999!*!"
    export MPESA_SANDBOX_CERTIFICATE_PATH="/path/to/SandboxCertificate.cer"  # if not bundled
    python examples/quickstart.py
"""

from mpesa_sdk import CommandId, Config, MpesaClient
from mpesa_sdk.exceptions import MpesaError


def main():
    config = Config.from_env(debug=True)

    with MpesaClient(config) as client:
        print("Sending B2C payment...")
        try:
            response = client.b2c(
                initiator_name="testapi",
                command_id=CommandId.BUSINESS_PAYMENT,
                amount=1000,
                party_a="600496",
                party_b="254708374149",
                remarks="Quickstart",
                queue_timeout_url="https://example.com/mpesa/timeout",
                result_url="https://example.com/mpesa/result",
                occasion="Test",
            )
        except MpesaError as e:
            print(f"✗ Request failed: {e}")
            return

        if response.is_accepted:
            print(f"✓ Accepted: {response.conversation_id}")
        else:
            print(f"✗ Rejected ({response.response_code}): {response.response_description}")

        print("\nQuerying account balance...")
        try:
            balance = client.account_balance(
                party_a="600496",
                remarks="Quickstart",
                initiator_name="testapi",
                queue_timeout_url="https://example.com/mpesa/timeout",
                result_url="https://example.com/mpesa/result",
            )
        except MpesaError as e:
            print(f"✗ Request failed: {e}")
            return

        print(f"  {balance.response_code}: {balance.response_description}")


if __name__ == "__main__":
    main()
