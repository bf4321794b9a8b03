from __future__ import annotations

from typing import Dict, List

import pandas as pd
import pytest

from ev_core.records import RECORD_FIELDS, records_from_rows


BEV = "Battery Electric Vehicle (BEV)"
PHEV = "Plug-in Hybrid Electric Vehicle (PHEV)"
ELIGIBLE = "Clean Alternative Fuel Vehicle Eligible"
NOT_ELIGIBLE = "Not eligible due to low battery range"
UNKNOWN = "Eligibility unknown as battery range has not been researched"


def row(*values: str) -> Dict[str, str]:
    return dict(zip(RECORD_FIELDS, values))


SAMPLE_ROWS: List[Dict[str, str]] = [
    row("KNDJX3AE0G", "King", "Seattle", "WA", "98101", "2016", "KIA", "SOUL EV", BEV, ELIGIBLE),
    row("5YJ3E1EB4L", "King", "Seattle", "WA", "98109", "2020", "TESLA", "MODEL 3", BEV, ELIGIBLE),
    row("1N4AZ0CP5D", "Pierce", "Tacoma", "WA", "98402", "2013", "NISSAN", "LEAF", BEV, ELIGIBLE),
    row("5YJYGDEE1M", "Snohomish", "Everett", "WA", "98201", "2021", "TESLA", "MODEL Y", BEV, UNKNOWN),
    row("1G1RC6E42B", "Thurston", "Olympia", "WA", "98501", "2011", "CHEVROLET", "VOLT", PHEV, ELIGIBLE),
    row("WBY8P6C58K", "King", "Bellevue", "WA", "98004", "2019", "BMW", "I3", BEV, ELIGIBLE),
    row("5YJSA1E26H", "San Diego", "San Diego", "CA", "92101", "2017", "TESLA", "MODEL S", BEV, ELIGIBLE),
    row("1FMCU0E1XN", "Fairfax", "Fairfax", "VA", "22030", "2022", "FORD", "ESCAPE", PHEV, NOT_ELIGIBLE),
    row("JTMAB3FV3P", "King", "Seattle", "WA", "98105", "2023", "TOYOTA", "RAV4 PRIME", PHEV, ELIGIBLE),
    row("3FA6P0PU7H", "Kitsap", "Bremerton", "WA", "98310", "2017", "FORD", "FUSION", PHEV, NOT_ELIGIBLE),
    row("ZZZ0000000", "", "", "", "", "", "", "", "", ""),
    row("7SAYGDEE5P", "King", "Redmond", "WA", "98052", "2023", "TESLA", "MODEL Y", BEV, UNKNOWN),
]


@pytest.fixture
def sample_records() -> pd.DataFrame:
    return records_from_rows(SAMPLE_ROWS)


@pytest.fixture
def example_records() -> pd.DataFrame:
    return records_from_rows(
        [
            row("5YJ3E1EA1M", "King", "Seattle", "WA", "98101", "2021", "Tesla", "Model 3", BEV, ELIGIBLE),
            row("1N4BZ1CP0K", "King", "Seattle", "WA", "98109", "2019", "Nissan", "Leaf", BEV, ELIGIBLE),
            row("5YJYGDEE9N", "Pierce", "Tacoma", "WA", "98402", "2022", "Tesla", "Model Y", BEV, UNKNOWN),
        ]
    )
