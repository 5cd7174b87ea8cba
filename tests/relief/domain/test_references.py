import re
from datetime import UTC, datetime

from relief.stock.references import ReferencePrefix, generate_reference_id


class TestReferenceIds:
    def test_format(self):
        reference = generate_reference_id(ReferencePrefix.RECEIVE, datetime(2024, 12, 21, tzinfo=UTC))
        assert re.fullmatch(r"RCV-20241221-\d{5}", reference)

    def test_prefixes(self):
        assert [prefix.value for prefix in ReferencePrefix] == ["INIT", "RCV", "TRF", "DSP", "ADJ"]
