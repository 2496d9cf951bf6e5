import json
import os
import tempfile


def load(filename, default=None):
    # loads the json content of a file
    # (returns `default` when the file doesn't exist and a default is given)

    if default is not None and not os.path.exists(filename):
        return default

    with open(filename) as file:
        return json.load(file)


def save(filename, content={}):
    # saves the json content to a file, replacing it in a single step so
    # readers never see a partially written file

    directory = os.path.dirname(filename) or "."
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".partial-", suffix=".json")
    try:
        with os.fdopen(fd, "w") as outfile:
            json.dump(
                content,
                outfile,
                indent=2,
            )
            outfile.flush()
            os.fsync(outfile.fileno())
        os.replace(tmp_path, filename)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    return filename
