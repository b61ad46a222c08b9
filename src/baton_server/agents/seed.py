"""Static seed list of agents registered at startup."""

from baton_server.agents.types import AgentDescriptor
from baton_server.config import BatonServerSettings

WALLET_BALANCE_AGENT_ID = "wallet-balance-agent"
NEGOTIATION_AGENT_ID = "carbon-credit-negotiation-agent"
PAYMENT_AGENT_ID = "payment-agent"


def default_agents(settings: BatonServerSettings) -> list[AgentDescriptor]:
    """Build the default agent descriptors from settings.

    The payment agent speaks the A2A protocol only, so its liveness is
    checked through its agent card rather than a /health route.
    """
    return [
        AgentDescriptor(
            id=WALLET_BALANCE_AGENT_ID,
            display_name="Wallet Balance Agent",
            endpoint=settings.wallet_balance_agent_url,
            capabilities=frozenset({"balance_check", "multi_network_balance"}),
        ),
        AgentDescriptor(
            id=NEGOTIATION_AGENT_ID,
            display_name="Carbon Credit Negotiation Agent",
            endpoint=settings.negotiation_agent_url,
            capabilities=frozenset({"carbon_negotiation", "carbon_credit_purchase"}),
        ),
        AgentDescriptor(
            id=PAYMENT_AGENT_ID,
            display_name="Payment Agent",
            endpoint=settings.payment_agent_url,
            capabilities=frozenset({"payment_processing", "transaction_settlement"}),
            probe_path="/.well-known/agent-card.json",
        ),
    ]
