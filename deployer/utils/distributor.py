DISTRIBUTOR_GAS_LIMIT = 500_000


def update_tokens_per_interval(executor, distributor, tokens_per_interval, label):
    """
    Sets a reward distributor's emission rate.
    A distributor sitting at a zero rate may not have moved its
    `lastDistributionTime` for a while, so it's bumped first to avoid paying
    out the idle period at the new rate.
    Returns the confirmed records.
    """
    records = []
    if distributor.tokensPerInterval() == 0:
        records.append(executor.send(
            distributor.updateLastDistributionTime(tx={"gas": DISTRIBUTOR_GAS_LIMIT}),
            f"{label}.updateLastDistributionTime",
        ))

    records.append(executor.send(
        distributor.setTokensPerInterval(tokens_per_interval, tx={"gas": DISTRIBUTOR_GAS_LIMIT}),
        f"{label}.setTokensPerInterval",
    ))
    return records
