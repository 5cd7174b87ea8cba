import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def relief_bed():
    from relief.domain import relief

    bed = DomainFixture(relief)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(relief_bed):
    with relief_bed.domain_context():
        yield
