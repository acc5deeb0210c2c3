"""Which affordances a viewer gets on a post."""

from __future__ import annotations

from spacebook.content.models import Post, PostPermissions


def post_permissions(viewer_id: int, profile_id: int, post: Post) -> PostPermissions:
    """
    Mirror the server's rules so flows never offer an action it will refuse.

    - Own post: editable and deletable, never likeable.
    - Someone else's post on someone else's profile: likeable only.
    - Someone else's post on the viewer's own profile: nothing.
    """
    if post.author.user_id == viewer_id:
        return PostPermissions(can_like=False, can_edit=True, can_delete=True)
    if profile_id != viewer_id:
        return PostPermissions(can_like=True, can_edit=False, can_delete=False)
    return PostPermissions(can_like=False, can_edit=False, can_delete=False)
