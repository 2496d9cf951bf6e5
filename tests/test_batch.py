import math

import pytest

from constants import ALICE, BOB, CHARLIE
from deployer.utils.batch import columns, process_batch, read_csv
from deployer.utils.errors import BatchLengthMismatch


def _collect():
    batches = []
    return batches, batches.append


@pytest.mark.parametrize("length,batch_size", [(10, 3), (9, 3), (1, 5), (5, 1), (7, 7)])
def test_process_batch_partition(length, batch_size):
    tokens = [f"token{i}" for i in range(length)]
    amounts = list(range(length))
    batches, handler = _collect()

    calls = process_batch([tokens, amounts], batch_size, handler)

    assert calls == len(batches) == math.ceil(length / batch_size)
    assert all(len(batch) == batch_size for batch in batches[:-1])
    assert len(batches[-1]) == (length % batch_size or batch_size)

    flattened = [item for batch in batches for item in batch]
    assert [token for token, _ in flattened] == tokens
    assert [amount for _, amount in flattened] == amounts


def test_process_batch_groups_are_tuples_per_index():
    batches, handler = _collect()

    process_batch([[ALICE, BOB, CHARLIE], [1, 2, 3], [True, False, True]], 2, handler)

    assert batches == [
        [(ALICE, 1, True), (BOB, 2, False)],
        [(CHARLIE, 3, True)],
    ]


def test_process_batch_empty():
    batches, handler = _collect()

    assert process_batch([[], []], 10, handler) == 0
    assert process_batch([], 10, handler) == 0
    assert batches == []


def test_process_batch_handles_groups_sequentially():
    order = []

    def handler(batch):
        order.append(("start", batch[0][0]))
        order.append(("end", batch[0][0]))

    process_batch([["a", "b", "c"]], 1, handler)

    assert order == [("start", "a"), ("end", "a"), ("start", "b"), ("end", "b"), ("start", "c"), ("end", "c")]


def test_process_batch_handler_failure_stops():
    seen = []

    def handler(batch):
        seen.append(batch)
        raise RuntimeError("tx failed")

    with pytest.raises(RuntimeError):
        process_batch([[1, 2, 3, 4]], 2, handler)

    assert len(seen) == 1


def test_process_batch_length_mismatch():
    with pytest.raises(BatchLengthMismatch) as exc_info:
        process_batch([[1, 2, 3], [1, 2]], 2, lambda batch: None)

    assert exc_info.value.index == 1


def test_process_batch_rejects_empty_batches():
    with pytest.raises(ValueError):
        process_batch([[1]], 0, lambda batch: None)


#########
# Input #
#########


def test_read_csv_and_columns(tmp_path):
    filename = tmp_path / "keepers.csv"
    filename.write_text(f"account,isActive\n{ALICE},true\n{BOB},false\n")

    records = read_csv(str(filename))

    assert records == [
        {"account": ALICE, "isActive": "true"},
        {"account": BOB, "isActive": "false"},
    ]
    assert columns(records, "account", "isActive") == [[ALICE, BOB], ["true", "false"]]


def test_read_csv_feeds_process_batch(tmp_path):
    filename = tmp_path / "tokens.csv"
    rows = "\n".join(f"0x{i:040x},{i * 100}" for i in range(5))
    filename.write_text(f"token,amount\n{rows}\n")
    batches, handler = _collect()

    process_batch(columns(read_csv(str(filename)), "token", "amount"), 2, handler)

    assert [len(batch) for batch in batches] == [2, 2, 1]
    assert batches[-1] == [(f"0x{4:040x}", "400")]
