import csv

from deployer.utils import log
from deployer.utils.errors import BatchLengthMismatch


def process_batch(batch_lists, batch_size, handler):
    """
    Zips the parallel `batch_lists` into per-index tuples and hands them to
    `handler` in groups of `batch_size`, one group at a time, then once more
    with the trailing partial group if there is one.
    The first list sets the expected length.
    Returns the number of handler calls.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    batch_lists = [list(batch_list) for batch_list in batch_lists]
    if not batch_lists:
        return 0

    reference_list = batch_lists[0]
    for index, batch_list in enumerate(batch_lists[1:], start=1):
        if len(batch_list) != len(reference_list):
            raise BatchLengthMismatch(index, len(reference_list), len(batch_list))

    calls = 0
    current_batch = []
    for i in range(len(reference_list)):
        current_batch.append(tuple(batch_list[i] for batch_list in batch_lists))

        if len(current_batch) == batch_size:
            log.info(f"handling batch {i + 1}/{len(reference_list)} ({len(current_batch)} items)")
            handler(current_batch)
            calls += 1
            current_batch = []

    if current_batch:
        log.info(f"handling final batch ({len(current_batch)} items of {len(reference_list)})")
        handler(current_batch)
        calls += 1

    return calls


def read_csv(filename, delimiter=","):
    # records of a delimited file with a header row
    with open(filename, newline="") as file:
        return [dict(record) for record in csv.DictReader(file, delimiter=delimiter)]


def columns(records, *names):
    """
    Splits records into one list per column name, ready for `process_batch`.
    """
    return [[record[name] for record in records] for name in names]
