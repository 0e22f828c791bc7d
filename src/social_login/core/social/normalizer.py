"""Provider profile normalization."""

from social_login.core.social.provider import RawProfile
from social_login.domain.models import MISSING_FIELD, CanonicalIdentity

# canonical field -> RawProfile attribute
PROFILE_FIELDS = {
    "firstname": "first_name",
    "lastname": "last_name",
    "email": "email",
}


class ProfileNormalizer:
    """Maps a provider profile onto a CanonicalIdentity.

    Absent or null fields become MISSING_FIELD so every field of the result
    is populated. Never fails, even for an empty profile.
    """

    def normalize(self, profile: RawProfile) -> CanonicalIdentity:
        data = {}
        for field, attribute in PROFILE_FIELDS.items():
            value = getattr(profile, attribute, None)
            data[field] = value if value is not None else MISSING_FIELD
        return CanonicalIdentity(**data)
