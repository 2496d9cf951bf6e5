from deployer.utils.edges import role_edge, setting_edge


def run(deployment):
    deployment.log.h2("ReferralStorage")

    if not deployment.has_address("PositionRouter"):
        deployment.log.warn("No PositionRouter recorded, skipping referral storage wiring")
        return

    position_router = deployment.get_contract("PositionRouter")
    referral_storage = deployment.get_contract("ReferralStorage")

    deployment.reconcile([
        setting_edge(position_router, "referralStorage", "setReferralStorage", referral_storage),
        role_edge(referral_storage, "isHandler", "setHandler", position_router),
    ])
