import os

import click

from config.networks import DEFAULT_NETWORK, NETWORKS
from deployer.utils import log
from deployer.utils.address_cache import DEFAULT_CACHE_DIR, AddressCache
from deployer.utils.contracts import (ARTIFACTS_DIR, ContractHandleFactory,
                                      ContractRegistry)
from deployer.utils.deployment import Deployment
from deployer.utils.executor import TransactionExecutor
from deployer.utils.network import (DEFAULT_ACCOUNT, NETWORK_ENV_VAR, connect,
                                    resolve_profile, verify_chain_id)
from deployer.utils.task_runner import TaskRunner

TASKS_DIR = "./tasks"


@click.command()
@click.option(
    "--network", "-n",
    default=None,
    type=click.Choice(sorted(NETWORKS), case_sensitive=False),
    help=f"Network to reconcile. Falls back to `{NETWORK_ENV_VAR}` (process environment or `.env`), then `{DEFAULT_NETWORK}`.",
)
@click.option(
    "--account", "-a",
    default=DEFAULT_ACCOUNT,
    help="Account name, the key is read from `<ACCOUNT>_PRIVATE_KEY`. Defaults to `DEPLOYER`.",
)
@click.option(
    "--tasks-dir",
    default=TASKS_DIR,
    help="Directory holding one folder of numbered task scripts per network. Defaults to `./tasks`.",
)
@click.option("--cache-dir", default=DEFAULT_CACHE_DIR, help="Directory of the address cache files.")
@click.option("--artifacts-dir", default=ARTIFACTS_DIR, help="Directory of the compiled contract artifacts.")
@click.option("--start", "-t", default="0", help="Number of the first task to run. Defaults to the first one.")
@click.option("--end", "-e", default="0", help="Number of the last task to run. Defaults to the last one.")
@click.option("--single", "-s", is_flag=True, default=False, help="Only run the first selected task.")
@click.option("--skip-chain-check", is_flag=True, default=False, help="Don't compare the endpoint chain id.")
def cli(network, account, tasks_dir, cache_dir, artifacts_dir, start, end, single, skip_chain_check):
    """
    Reconciles the protocol contracts of one network with the state declared
    by its task scripts.

    Task scripts live in `<tasks-dir>/<network>/` and are prefixed with a
    number that sets the order they run in. Each one exposes
    `run(deployment)` and declares what must hold on-chain; anything already
    in place is skipped, so after a failure the same command can simply be
    run again.

    Addresses of contracts deployed along the way are recorded in
    `<cache-dir>/.tmp-addresses-<network>.json`.
    """
    profile = resolve_profile(network, account)
    w3 = connect(profile)
    if not skip_chain_check:
        verify_chain_id(w3, profile)

    log.h1("Contract Reconciliation")
    log.info(f"Network: {profile.name} (chain id {profile.chain_id}).")
    log.info(f"Signer account `{profile.sender}`.")
    log.info(f"Running tasks from {start} to {end}.")
    log.info("")

    registry = ContractRegistry.from_dir(artifacts_dir)
    deployment = Deployment(
        profile,
        ContractHandleFactory(profile, registry, w3),
        TransactionExecutor.from_profile(profile, w3),
        AddressCache(cache_dir),
    )

    log.h2("Running tasks...")
    completed = TaskRunner(os.path.join(tasks_dir, profile.name)).run(deployment, start, end, single)

    log.info(f"Tasks completed: {', '.join(completed) or 'none'}")
    log.info("Done.")
    log.info("")


if __name__ == "__main__":
    cli()
