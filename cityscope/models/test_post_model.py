# cityscope/models/test_post_model.py
import pytest

from cityscope.core.errors import ValidationError, NotFoundError
from cityscope.models.post import Post, PostType, clean_image_url


def _post(**overrides):
    fields = dict(author_id="author-1", content="Great taco spot downtown!", post_type="recommend", city="Austin")
    fields.update(overrides)
    return Post.new(**fields)


def test_new_post_starts_empty_and_active():
    post = _post(content="  padded text  ")
    assert post.content == "padded text"
    assert post.post_type is PostType.RECOMMEND
    assert post.likes == [] and post.dislikes == [] and post.replies == []
    assert post.is_active


def test_content_length_boundaries():
    assert len(_post(content="x" * 280).content) == 280
    with pytest.raises(ValidationError, match="280"):
        _post(content="x" * 281)
    with pytest.raises(ValidationError):
        _post(content="   ")


def test_unknown_post_type_rejected():
    with pytest.raises(ValidationError):
        _post(post_type="rant")


def test_city_required():
    with pytest.raises(ValidationError):
        _post(city="  ")


def test_image_url_pattern():
    assert clean_image_url("https://cdn.example.com/a/b.JPG") == "https://cdn.example.com/a/b.JPG"
    assert clean_image_url("") is None
    with pytest.raises(ValidationError):
        clean_image_url("https://cdn.example.com/file.pdf")


def test_toggle_like_odd_and_even_calls():
    post = _post()
    for _ in range(3):
        post.toggle_like("u1")
    assert post.is_liked_by("u1") and not post.is_disliked_by("u1")
    post.toggle_like("u1")
    assert not post.is_liked_by("u1")
    assert post.likes_count == 0


def test_dislike_after_like_moves_the_user():
    post = _post()
    post.toggle_like("u1")
    post.toggle_like("u2")
    assert post.toggle_dislike("u1") is True
    assert post.likes == ["u2"]
    assert post.dislikes == ["u1"]


def test_like_and_dislike_never_overlap_under_interleaving():
    post = _post()
    sequence = ["like", "dislike", "dislike", "like", "like", "dislike"]
    for step in sequence:
        for user in ("a", "b"):
            if step == "like":
                post.toggle_like(user)
            else:
                post.toggle_dislike(user)
            assert not (set(post.likes) & set(post.dislikes))


def test_toggles_reject_inactive_post():
    post = _post()
    post.is_active = False
    with pytest.raises(NotFoundError):
        post.toggle_like("u1")
    with pytest.raises(NotFoundError):
        post.toggle_dislike("u1")


def test_add_then_remove_reply_restores_sequence():
    post = _post()
    kept = post.add_reply("u1", "first")
    before = [r.reply_id for r in post.replies]
    reply = post.add_reply("u2", "  second  ")
    assert reply.content == "second"
    assert post.replies_count == 2
    assert post.remove_reply(reply.reply_id) is True
    assert [r.reply_id for r in post.replies] == before == [kept.reply_id]


def test_remove_unknown_reply_is_noop():
    post = _post()
    post.add_reply("u1", "hello")
    assert post.remove_reply("missing") is False
    assert post.replies_count == 1


def test_reply_length_validated():
    post = _post()
    with pytest.raises(ValidationError):
        post.add_reply("u1", "y" * 281)


def test_enforce_reaction_exclusivity_cleans_corrupted_lists():
    post = _post()
    post.likes = ["a", "b", "a", "c"]
    post.dislikes = ["c", "d", "d"]
    post.enforce_reaction_exclusivity()
    assert post.likes == ["a", "b"]
    assert post.dislikes == ["d"]


def test_document_roundtrip_keeps_replies():
    post = _post()
    post.toggle_like("u1")
    post.add_reply("u2", "nice")
    restored = Post.from_dict(post.to_dict())
    assert restored == post
