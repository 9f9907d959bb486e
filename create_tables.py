import asyncio

from dskp_manager.database import init_db
# Import Models to register them with Base
from dskp_manager.models import school

async def main():
    print("Initializing Database Tables...")
    try:
        await init_db()
        print("Tables Created Successfully (classes, subjects, dskp_items).")
    except Exception as e:
        print(f"Error creating tables: {e}")
        raise

if __name__ == "__main__":
    asyncio.run(main())
