import os

from mergedeep import merge

from deployer.utils import json_file
from deployer.utils import log
from deployer.utils.errors import AddressCacheError

DEFAULT_CACHE_DIR = "."


class AddressCache:
    """
    Persisted `label -> address` record of deployed contracts, one JSON file
    per network.

    Writes are additive: `merge` overlays a patch on top of what is already on
    disk and never drops a label the patch doesn't mention.

    Processes targeting the same network are not synchronized. Two runs merging
    at the same time race at the file level and the last writer wins, so
    deployment runs for a network must be serialized by the operator.
    """

    def __init__(self, directory=DEFAULT_CACHE_DIR):
        self.directory = directory

    def path(self, network):
        return os.path.join(self.directory, f".tmp-addresses-{network}.json")

    def load(self, network) -> dict:
        """
        Returns the persisted entries for `network`, or an empty mapping when
        nothing has been recorded yet.
        """
        filename = self.path(network)
        try:
            entries = json_file.load(filename, default={})
        except ValueError as exception:
            raise AddressCacheError(f"Address cache {filename} is not valid JSON: {exception}") from exception

        if not isinstance(entries, dict):
            raise AddressCacheError(
                f"Address cache {filename} must contain a JSON object, found {type(entries).__name__}"
            )
        return entries

    def merge(self, network, patch) -> dict:
        """
        Overlays `patch` on the persisted entries (patch values win on
        collision) and writes the result back atomically.
        Returns the merged mapping.
        """
        merged = merge({}, self.load(network), dict(patch))
        json_file.save(self.path(network), merged)

        log.h3(f"Address cache {self.path(network)} updated: {', '.join(sorted(patch))}")
        return merged
