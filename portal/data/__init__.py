"""Static data bundled with the client."""

from portal.data.universities import FALLBACK_UNIVERSITIES, get_university_by_id

__all__ = ["FALLBACK_UNIVERSITIES", "get_university_by_id"]
