"""
app/schemas/recalls.py

Response schemas for recall list, search and detail endpoints.
"""

from __future__ import annotations

from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field

from app.domain.recall import CanonicalRecall
from app.mappers.packed_fields import split_consumer_actions, split_distributors, split_image_urls
from app.schemas.statistics import QuickStatsResponse
from risk.base import RISK_TIER_LABELS


class RecallSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    brand: str
    category: str
    risk_level: str
    reason: str
    batch_number: str | None = None
    image: str | None = None
    recall_date: str | None = None


class RecallListResponse(BaseModel):
    items: list[RecallSummaryResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    offset: int = Field(0, ge=0)


class RecentRecallsResponse(RecallListResponse):
    """
    Recent page plus tier counts and leading categories over that page.
    """

    stats: QuickStatsResponse


class RecallDetailResponse(RecallSummaryResponse):
    """
    Full recall sheet. Packed image, distributor and consumer-action
    fields are also returned split into lists.
    """

    record_number: str | None = None
    record_version: int | None = None
    risk_label: str
    legal_nature: str | None = None
    sub_category: str | None = None
    packaging: str | None = None
    risks: str | None = None
    commercialisation_start: str | None = None
    commercialisation_end: str | None = None
    temperature_conservation: str | None = None
    health_mark: str | None = None
    additional_info: str | None = None
    geographic_zone: str | None = None
    distributors: str | None = None
    distributor_list: list[str] = Field(default_factory=list)
    health_recommendations: str | None = None
    risk_description: str | None = None
    consumer_actions: str | None = None
    consumer_action_list: list[str] = Field(default_factory=list)
    contact_number: str | None = None
    compensation_method: str | None = None
    procedure_end_date: str | None = None
    public_additional_info: str | None = None
    product_list_link: str | None = None
    distributors_list_link: str | None = None
    poster_pdf_link: str | None = None
    recall_page_link: str | None = None
    images: str | None = None
    image_list: list[str] = Field(default_factory=list)
    guid: str | None = None

    @classmethod
    def from_recall(cls, recall: CanonicalRecall) -> RecallDetailResponse:
        return cls.model_validate(
            {
                **asdict(recall),
                "risk_label": RISK_TIER_LABELS.get(recall.risk_level, recall.risk_level),
                "image_list": split_image_urls(recall.images),
                "distributor_list": split_distributors(recall.distributors),
                "consumer_action_list": split_consumer_actions(recall.consumer_actions),
            }
        )
