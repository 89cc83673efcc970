"""
Small inventory service wired through AppLife.

Run with: applife run --root examples -m inventory_app
"""
import asyncio

from applife import controller, dependency, module, on_init, on_start


@controller(load_order=0)
class Settings:
    def __init__(self):
        self.values = {"currency": "EUR", "low_stock": 3}


@controller(load_order=1)
class Warehouse:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.stock: dict[str, int] = {}

    @on_init
    def load(self):
        self.stock.update({"bolt": 120, "nut": 2, "washer": 40})


@controller(load_order=2)
class Restocker:
    def __init__(self, warehouse: Warehouse, settings: Settings):
        self.warehouse = warehouse
        self.threshold = settings.values["low_stock"]
        self.orders: list[str] = []

    @on_start
    async def scan(self):
        await asyncio.sleep(0)
        for item, count in self.warehouse.stock.items():
            if count < self.threshold:
                self.orders.append(item)
        print(f"restock: {', '.join(self.orders) or 'nothing'}")


@controller(load_order=2)
class Reporter:
    @on_start
    def summary(self):
        warehouse = dependency(Warehouse)
        print(f"inventory: {sum(warehouse.stock.values())} items")


@module([Settings, Warehouse, Restocker, Reporter])
class InventoryModule:
    pass
