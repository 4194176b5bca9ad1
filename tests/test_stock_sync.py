import pytest

from orderhub.marketplaces.client import MarketplaceError
from orderhub.marketplaces.connectors import StockConnector, WooCommerceConnector, get_connector
from orderhub.marketplaces.sync import StockSync
from conftest import make_marketplace, make_product


class FakeConnector:
    pushed = []
    failing = set()

    def __init__(self, marketplace, timeout):
        self.marketplace = marketplace

    def update_stock(self, sku, stock):
        if self.marketplace["name"] in self.failing:
            raise MarketplaceError("store unreachable")
        self.pushed.append((self.marketplace["name"], sku, stock))
        return True


@pytest.fixture
def fake_connector():
    FakeConnector.pushed = []
    FakeConnector.failing = set()
    return FakeConnector


@pytest.fixture
def stock_sync(db, fake_connector):
    sync = StockSync(db, workers=2, connector_factory=fake_connector)
    yield sync
    sync.shutdown()


def test_only_eligible_marketplaces_are_updated(db, stock_sync, fake_connector):
    amazon = make_marketplace(db, name="Amazon")
    make_marketplace(db, name="Offline", is_connected=False)
    make_marketplace(db, name="Untracked", stock_tracking=False)
    make_marketplace(db, name="Manual", auto_update_stock=False)

    updated = stock_sync.sync_stock("ABC-1", 7)

    assert updated == [amazon["id"]]
    assert fake_connector.pushed == [("Amazon", "ABC-1", 7)]


def test_failing_marketplace_does_not_stop_the_others(db, stock_sync, fake_connector):
    make_marketplace(db, name="Broken")
    ok = make_marketplace(db, name="eBay", type="ebay")
    fake_connector.failing.add("Broken")

    updated = stock_sync.sync_stock("ABC-1", 3)

    assert updated == [ok["id"]]
    assert db.get_marketplace(ok["id"])["last_sync"] is not None


def test_no_targets(db, stock_sync, fake_connector):
    assert stock_sync.sync_stock("ABC-1", 3) == []
    assert fake_connector.pushed == []


def test_dispatch_runs_in_background(db, stock_sync, fake_connector):
    make_marketplace(db, name="Amazon")
    futures = stock_sync.dispatch_many([("A", 1), ("B", 2)])
    results = [f.result(timeout=5) for f in futures]
    assert all(len(r) == 1 for r in results)
    assert sorted(fake_connector.pushed) == [("Amazon", "A", 1), ("Amazon", "B", 2)]


def test_woocommerce_without_credentials_is_skipped(db):
    make_marketplace(db, name="Shop", type="woocommerce")
    sync = StockSync(db, workers=1)
    try:
        assert sync.sync_stock("ABC-1", 3) == []
    finally:
        sync.shutdown()


def test_get_connector_by_type():
    assert type(get_connector({"type": "amazon", "name": "Amazon"})) is StockConnector
    woo = get_connector({
        "type": "woocommerce", "name": "Shop",
        "store_url": "https://shop.example", "api_key": "ck", "api_secret": "cs"
    })
    assert isinstance(woo, WooCommerceConnector)
    assert woo.client.base_url == "https://shop.example/wp-json/wc/v3/"


def test_pushes_current_level_not_the_queued_one(db, stock_sync, fake_connector):
    make_marketplace(db, name="Amazon")
    make_product(db, sku="ABC-1", stock=4)

    stock_sync.sync_stock("ABC-1", 7)

    assert fake_connector.pushed == [("Amazon", "ABC-1", 4)]


def test_unknown_sku_pushes_queued_level(db, stock_sync, fake_connector):
    make_marketplace(db, name="Amazon")
    stock_sync.sync_stock("GONE-1", 2)
    assert fake_connector.pushed == [("Amazon", "GONE-1", 2)]
