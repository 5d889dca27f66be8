"""
Tests for the in-memory and JSON market repositories

Checked properties:
1. Seeded markets are always listed, created markets come first
2. Appending an existing id replaces the old record
3. The JSON store survives new instances and keeps its wire format
4. An unreadable store is skipped on reads and never overwritten
"""
import json

import pytest

from rangemarket.errors import UnexpectedFailure
from rangemarket.models import Domain, MarketStats, StoredMarket, UniformPrior
from rangemarket.services import InMemoryMarketRepository, JsonMarketRepository


def _stored(market_id="rain-in-paris-abc", title="Rain in Paris"):
    return StoredMarket(
        id=market_id,
        title=title,
        unit="mm",
        category="Weather",
        domain=Domain(min=0, max=100),
        prior=UniformPrior(),
        stats=MarketStats(mean=50, variance=833.33),
        coefficients=[1.0, 2.0],
        ranges=[(50.0, 100.0)],
        expiry="2030-01-01T00:00:00.000Z",
        created_at="2023-11-14T22:13:20.000Z",
        tx_signature="sig",
    )


# =============================================================================
# In-memory store
# =============================================================================


class TestInMemoryRepository:

    async def test_seeded(self, repository):
        ids = [m.id for m in await repository.list_markets()]
        assert ids == [
            'eth-price-2025', 'us-cpi-q2-2025', 'global-temp-2035',
            'sp500-return-2025', 'ai-benchmark-2026',
        ]

    async def test_lookup(self, repository):
        assert (await repository.get_market('us-cpi-q2-2025')).stats.mean == 2.5
        assert await repository.get_market('nope') is None

    async def test_created_listed_first(self, repository):
        await repository.append_market(_stored())
        markets = await repository.list_markets()
        assert markets[0].id == "rain-in-paris-abc"
        assert len(markets) == 6

    async def test_append_replaces_same_id(self, repository):
        await repository.append_market(_stored(title="first"))
        await repository.append_market(_stored(title="second"))
        assert len(await repository.list_markets()) == 6
        assert (await repository.get_market("rain-in-paris-abc")).title == "second"

    async def test_custom_seed(self):
        assert await InMemoryMarketRepository(markets=[]).list_markets() == []


# =============================================================================
# JSON store
# =============================================================================


class TestJsonRepository:

    async def test_creates_store_on_first_use(self, tmp_path):
        path = tmp_path / "data" / "markets.json"
        repo = JsonMarketRepository(str(path))
        assert len(await repo.list_markets()) == 5
        assert json.loads(path.read_text())['markets'] == []

    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "markets.json"
        await JsonMarketRepository(str(path)).append_market(_stored())

        reopened = JsonMarketRepository(str(path))
        assert await reopened.get_market("rain-in-paris-abc") == _stored()
        assert (await reopened.list_markets())[0].id == "rain-in-paris-abc"

    async def test_append_replaces_same_id(self, tmp_path):
        repo = JsonMarketRepository(str(tmp_path / "markets.json"), seeded=[])
        await repo.append_market(_stored(title="first"))
        await repo.append_market(_stored(title="second"))
        assert [m.title for m in await repo.list_markets()] == ["second"]

    async def test_wire_format(self, tmp_path):
        path = tmp_path / "markets.json"
        await JsonMarketRepository(str(path)).append_market(_stored())
        record = json.loads(path.read_text())['markets'][0]
        assert record['txSignature'] == "sig"
        assert record['createdAt'] == "2023-11-14T22:13:20.000Z"
        assert record['ranges'] == [[50.0, 100.0]]

    async def test_malformed_record_skipped(self, tmp_path):
        path = tmp_path / "markets.json"
        good = _stored().to_dict()
        bad = dict(good, id="broken", prior={'kind': 'gamma', 'params': {}})
        path.write_text(json.dumps({'markets': [bad, "not-a-record", good]}))

        markets = await JsonMarketRepository(str(path), seeded=[]).list_markets()
        assert [m.id for m in markets] == ["rain-in-paris-abc"]

    async def test_seeded_fallthrough(self, tmp_path):
        repo = JsonMarketRepository(str(tmp_path / "markets.json"))
        assert (await repo.get_market('eth-price-2025')).unit == 'USD'
        assert await repo.get_market('missing') is None


class TestUnreadableStore:

    TRUNCATED = '{"markets": [ {"id": "keep-me"'

    async def test_invalid_json_ignored_on_read(self, tmp_path):
        path = tmp_path / "markets.json"
        path.write_text(self.TRUNCATED)
        assert len(await JsonMarketRepository(str(path)).list_markets()) == 5

    async def test_invalid_json_not_overwritten(self, tmp_path):
        path = tmp_path / "markets.json"
        path.write_text(self.TRUNCATED)

        with pytest.raises(UnexpectedFailure):
            await JsonMarketRepository(str(path)).append_market(_stored())
        assert path.read_text() == self.TRUNCATED

    @pytest.mark.parametrize("content", ['[1, 2, 3]', '"markets"', '{"markets": {"id": "x"}}'])
    async def test_wrong_shape(self, tmp_path, content):
        path = tmp_path / "markets.json"
        path.write_text(content)
        repo = JsonMarketRepository(str(path))

        assert len(await repo.list_markets()) == 5
        with pytest.raises(UnexpectedFailure):
            await repo.append_market(_stored())
        assert path.read_text() == content
