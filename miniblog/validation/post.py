"""Validation of post requests."""

from miniblog.core.context import Principal
from miniblog.schemas.post import (
    CreatePostRequest,
    DeletePostRequest,
    GetPostRequest,
    ListPostRequest,
    UpdatePostRequest,
)
from miniblog.validation.rules import (
    Rules,
    check_limit,
    invalid,
    not_empty,
    validate_all_fields,
    validate_selected_fields,
)

TITLE_FILTER_MIN_LEN = 1
TITLE_FILTER_MAX_LEN = 100

POST_RULES: Rules = {
    "post_id": not_empty("postID"),
    "post_ids": not_empty("postIDs"),
    "title": not_empty("title"),
    "content": not_empty("content"),
    "limit": check_limit,
}


class PostValidation:
    def validate_create_post_request(self, principal: Principal | None, rq: CreatePostRequest) -> None:
        validate_all_fields(rq, POST_RULES)

    def validate_update_post_request(self, principal: Principal | None, rq: UpdatePostRequest) -> None:
        validate_all_fields(rq, POST_RULES)

    def validate_delete_post_request(self, principal: Principal | None, rq: DeletePostRequest) -> None:
        validate_all_fields(rq, POST_RULES)

    def validate_get_post_request(self, principal: Principal | None, rq: GetPostRequest) -> None:
        validate_all_fields(rq, POST_RULES)

    def validate_list_post_request(self, principal: Principal | None, rq: ListPostRequest) -> None:
        # title is a search filter here, not post content.
        if rq.title is not None and not TITLE_FILTER_MIN_LEN <= len(rq.title) <= TITLE_FILTER_MAX_LEN:
            raise invalid(
                f"title filter must be between {TITLE_FILTER_MIN_LEN} and {TITLE_FILTER_MAX_LEN} characters"
            )
        validate_selected_fields(rq, POST_RULES, "offset", "limit")
