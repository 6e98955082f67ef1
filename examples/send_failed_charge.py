#!/usr/bin/env python3
"""
Example: Send a simulated Stripe webhook event to the monitor.

This script posts a synthetic charge event to a running monitor so the
alert path can be exercised without a real Stripe account.

Usage:
    python send_failed_charge.py 25.00 --email customer@example.com
    python send_failed_charge.py 10 --type charge.succeeded

Arguments:
    amount: Charge amount in major units (e.g., 25.00 USD)
"""

import argparse
import asyncio
import json
import secrets
import time
from decimal import Decimal
from typing import Optional

import aiohttp


def build_event(
    amount: Decimal,
    currency: str,
    event_type: str,
    email: Optional[str] = None,
    reason: Optional[str] = None
) -> dict:
    """Build a Stripe-shaped webhook event with a random charge ID."""
    charge = {
        'id': f"ch_sim_{secrets.token_hex(8)}",
        'object': 'charge',
        'amount': int(amount * 100),
        'currency': currency.lower(),
        'created': int(time.time()),
        'billing_details': {
            'email': email,
            'name': None
        },
        'customer': None,
        'failure_message': reason,
        'outcome': {
            'seller_message': None
        }
    }

    return {
        'id': f"evt_sim_{secrets.token_hex(8)}",
        'object': 'event',
        'type': event_type,
        'data': {
            'object': charge
        }
    }


async def send_event(url: str, event: dict) -> None:
    """Post the event and print the monitor's response."""
    charge = event['data']['object']

    print(f"Sending {event['type']} to {url}")
    print(f"  Charge ID: {charge['id']}")
    print(f"  Amount: {charge['amount']} {charge['currency'].upper()} (minor units)")
    print()

    async with aiohttp.ClientSession() as session:
        try:
            async with session.post(f"{url}/webhook", json=event) as response:
                body = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            print(f"❌ Could not reach monitor: {e}")
            return

    if response.status == 200:
        print("✅ Event acknowledged")
    else:
        print(f"❌ Monitor returned HTTP {response.status}")

    print(json.dumps(body, indent=2))


async def main():
    parser = argparse.ArgumentParser(
        description='Send a simulated Stripe webhook event to the monitor'
    )
    parser.add_argument(
        'amount',
        type=Decimal,
        help='Charge amount (e.g., 25.00)'
    )
    parser.add_argument(
        '--currency',
        default='usd',
        help='Currency code (default: usd)'
    )
    parser.add_argument(
        '--type',
        default='charge.failed',
        help='Event type (default: charge.failed)'
    )
    parser.add_argument(
        '--email',
        help='Customer email for billing_details'
    )
    parser.add_argument(
        '--reason',
        default='Your card was declined.',
        help='Failure message'
    )
    parser.add_argument(
        '--url',
        default='http://localhost:3000',
        help='Monitor base URL (default: http://localhost:3000)'
    )

    args = parser.parse_args()

    event = build_event(
        amount=args.amount,
        currency=args.currency,
        event_type=args.type,
        email=args.email,
        reason=args.reason
    )

    await send_event(args.url.rstrip('/'), event)


if __name__ == '__main__':
    asyncio.run(main())
