from deployer.utils.edges import (delegated_edge, membership_edge, role_edge,
                                  setting_edge)

DEPOSIT_FEE = 30  # 0.3%

ORDER_KEEPERS = [
    "0xCCE4614aDB19bc9e2296D5767Cad47d7b70BBd10",
    "0xA25bc8c1e230a476cB00f2e9c93ffC2D4e163dc5",
]
LIQUIDATORS = [
    "0xCCE4614aDB19bc9e2296D5767Cad47d7b70BBd10",
]
PARTNER_CONTRACTS = []


def run(deployment):
    deployment.log.h2("PositionManager")

    vault = deployment.get_contract("Vault")
    timelock = deployment.get_contract("Timelock", vault.gov())
    router = deployment.get_contract("Router")
    shorts_tracker = deployment.get_contract("ShortsTracker")
    weth = deployment.get_contract("WETH")
    order_book = deployment.get_contract("OrderBook")
    referral_storage = deployment.get_contract("ReferralStorage")

    position_manager = deployment.deploy(
        "PositionManager",
        vault,
        router,
        shorts_tracker,
        weth,
        DEPOSIT_FEE,
        order_book,
    )

    edges = [
        # position manager only reads from referral storage, no handler needed there
        setting_edge(position_manager, "referralStorage", "setReferralStorage", referral_storage),
        setting_edge(position_manager, "shouldValidateIncreaseOrder", "setShouldValidateIncreaseOrder", False),
    ]
    edges += [role_edge(position_manager, "isOrderKeeper", "setOrderKeeper", keeper) for keeper in ORDER_KEEPERS]
    edges += [role_edge(position_manager, "isLiquidator", "setLiquidator", liquidator) for liquidator in LIQUIDATORS]
    edges += [
        role_edge(timelock, "isHandler", "setContractHandler", position_manager),
        delegated_edge(vault, "isLiquidator", timelock, "setLiquidator", position_manager),
        role_edge(shorts_tracker, "isHandler", "setHandler", position_manager),
        membership_edge(router, "plugins", "addPlugin", position_manager),
    ]
    edges += [role_edge(position_manager, "isPartner", "setPartner", partner) for partner in PARTNER_CONTRACTS]
    # last: handing over gov removes the signer's own permissions
    edges.append(setting_edge(position_manager, "gov", "setGov", vault.gov))

    deployment.reconcile(edges)
