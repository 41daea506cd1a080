import pytest

from fees.datasource import CSVConfigSource, DefaultConfigSource
from fees.registry import SourceRegistry
from fees.services import FeeService

SETTINGS_CSV = """listing_type,commission_rate,is_active
buy_it_now,5.0,true
make_offer,4.0,true
classified,3.0,false
"""

PROMOTIONS_CSV = """promotion_type,price,duration_days,description,is_active
featured_listing,3.49,7,Featured,true
top_placement,5.99,7,Top,false
"""


@pytest.fixture
def settings_csv(tmp_path):
    path = tmp_path / "commission_settings.csv"
    path.write_text(SETTINGS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def promotions_csv(tmp_path):
    path = tmp_path / "promotion_settings.csv"
    path.write_text(PROMOTIONS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def csv_registry(settings_csv, promotions_csv):
    reg = SourceRegistry(DefaultConfigSource)
    reg.add(lambda: CSVConfigSource(settings_csv, promotions_csv), code="csv")
    return reg


@pytest.fixture
def service(csv_registry):
    return FeeService(csv_registry, source="csv")


@pytest.fixture
def default_service():
    reg = SourceRegistry(DefaultConfigSource)
    return FeeService(reg, source="defaults")
