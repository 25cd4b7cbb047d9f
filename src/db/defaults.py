"""Default organization and categories ensured at startup.

Idempotent: existing categories (deleted ones included) are never touched,
only missing names are created.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import OrganizationRow
from src.models.common import CategoryIcon, new_uuid7
from src.repositories.categories import CategoryRepository
from src.repositories.organizations import OrganizationRepository

logger = logging.getLogger(__name__)

STARTUP_ORG_NAME = "Enterprise Corp"
STARTUP_ORG_SLUG = "enterprise-corp"

DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {"name": "Servers",
     "description": "On-premise hardware, virtual machines, and server management.",
     "icon": CategoryIcon.SERVER.value},
    {"name": "Networking",
     "description": "VPN, Switch configurations, WLAN, and internal network guides.",
     "icon": CategoryIcon.NETWORK.value},
    {"name": "Office 365",
     "description": "Exchange Online, Teams, SharePoint, and Entra ID management.",
     "icon": CategoryIcon.CLOUD.value},
    {"name": "Hardware",
     "description": "Asset tracking, peripheral troubleshooting, and hardware support.",
     "icon": CategoryIcon.HARD_DRIVE.value},
    {"name": "Security",
     "description": "Threat mitigation protocols, compliance standards, and security audits.",
     "icon": CategoryIcon.SECURITY.value},
    {"name": "Mobile Devices",
     "description": "Legacy documentation for enterprise mobile device management.",
     "icon": CategoryIcon.MOBILE.value},
]


async def ensure_organization(session: AsyncSession) -> list[OrganizationRow]:
    """All organizations, creating the startup organization when there are none."""
    repo = OrganizationRepository(session)
    orgs = await repo.list_all()
    if not orgs:
        logger.info("No organizations found, creating %s", STARTUP_ORG_SLUG)
        org = await repo.create(
            organization_id=new_uuid7(),
            name=STARTUP_ORG_NAME,
            slug=STARTUP_ORG_SLUG,
        )
        orgs = [org]
    return orgs


async def ensure_default_categories(session: AsyncSession) -> int:
    """Create the missing default categories of every organization.

    Returns the number of categories created.
    """
    categories = CategoryRepository(session)
    created = 0
    for org in await ensure_organization(session):
        for spec in DEFAULT_CATEGORIES:
            if await categories.get_by_name(org.organization_id, spec["name"]) is not None:
                continue
            await categories.create(
                category_id=new_uuid7(),
                organization_id=org.organization_id,
                name=spec["name"],
                description=spec["description"],
                icon=spec["icon"],
            )
            created += 1
            logger.info("Seeded category %s for org %s", spec["name"], org.slug)
    return created
