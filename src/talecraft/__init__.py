"""TaleCraft - collaborative storytelling API.

Users author stories, optionally make them public, share them with
collaborators as editors or viewers, and comment on them.

Access control lives in :mod:`talecraft.services.access_policy`:

    from talecraft.services import authorize_story_access

    access = await authorize_story_access(lookup, principal_id, "42", "PUT")
"""

__version__ = "0.1.0"
