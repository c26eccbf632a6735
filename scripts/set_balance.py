import asyncio
import logging
import sys
from pathlib import Path

# Add project root to pythonpath
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from dotenv import load_dotenv

load_dotenv()

from tribute.db import SessionLocal
from tribute.repositories.balance import BalanceRepository

logging.basicConfig(level=logging.INFO)


async def set_balance(amount: int):
    async with SessionLocal() as session:
        row = await BalanceRepository(session).set_amount(amount)
        print(f"Balance set to {row.amount}")


if __name__ == "__main__":
    if len(sys.argv) != 2 or not sys.argv[1].isdigit():
        print("Usage: python scripts/set_balance.py <amount>")
        sys.exit(1)
    asyncio.run(set_balance(int(sys.argv[1])))
