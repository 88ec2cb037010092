"""
DonationRecord — запись о пожертвовании, которую ведёт bridge
"""

from pydantic import BaseModel, Field

from .address import Address, CampaignId


class DonationRecord(BaseModel):
    """(giverId, receiverId, token, amount); token = 0x0 для native."""

    giver_id: CampaignId
    receiver_id: CampaignId
    token: Address
    amount: int = Field(..., gt=0, description="Сумма в минимальных единицах актива")

    model_config = {"frozen": True}
