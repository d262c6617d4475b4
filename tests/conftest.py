import logging

import pytest

from neurograph.ai import loads_model

SCENARIO_MODEL = """\
2 3
2 identity
1 sigmoid
2
0 2 0.5
1 2 -0.5
1
2 0
"""

# 2 inputs -> 2 identity hidden nodes -> 1 sigmoid output
HIDDEN_MODEL = """\
3 5
2 identity
2 identity
1 sigmoid
6
0 2 0.5
0 3 -0.5
1 2 0.25
1 3 0.25
2 4 1.0
3 4 -1.0
0
"""


@pytest.fixture(autouse=True)
def setup_logging():
    """Keep library logs quiet unless a test captures them."""
    logging.getLogger("neurograph").setLevel(logging.WARNING)
    yield
    logging.getLogger("neurograph").setLevel(logging.NOTSET)


@pytest.fixture
def scenario_network():
    """2 inputs -> 1 sigmoid output with weights [0.5, -0.5] and zero bias."""
    return loads_model(SCENARIO_MODEL, learning_rate=0.1)


@pytest.fixture
def hidden_network():
    return loads_model(HIDDEN_MODEL, learning_rate=0.1)


@pytest.fixture
def scenario_model_file(tmp_path):
    path = tmp_path / "scenario.model"
    path.write_text(SCENARIO_MODEL)
    return path


@pytest.fixture
def dataset_files(tmp_path):
    """Small linearly separable train/test CSV files with two features."""
    rows = [
        "1.0,2.0,1",
        "2.0,3.0,1",
        "3.0,3.5,1",
        "-1.0,-2.0,0",
        "-2.0,-1.5,0",
        "-3.0,-2.5,0",
    ]
    train_path = tmp_path / "train.csv"
    test_path = tmp_path / "test.csv"
    train_path.write_text("\n".join(rows) + "\n")
    test_path.write_text("\n".join(rows[:2] + rows[3:5]) + "\n")
    return train_path, test_path
