from __future__ import annotations

from shared.common.models import Content
from shared.synthesis.embeddings import dimensions_for_model, embed_text, embedding_input, text_seed


def test_same_text_gives_identical_vectors() -> None:
    assert embed_text("The quick brown fox") == embed_text("The quick brown fox")


def test_different_texts_give_different_vectors() -> None:
    assert embed_text("first document") != embed_text("second document")


def test_values_stay_in_unit_range() -> None:
    for text in ("", "a", "hello world", "x" * 5000):
        assert all(-1.0 <= value <= 1.0 for value in embed_text(text))


def test_dimensions_depend_on_model() -> None:
    assert dimensions_for_model("text-embedding-004") == 768
    assert dimensions_for_model("multimodalembedding@001") == 1408
    assert dimensions_for_model(None) == 768
    assert len(embed_text("hi", dimensions_for_model("multimodalembedding@001"))) == 1408
    assert len(embed_text("hi", 32)) == 32


def test_seed_is_bounded() -> None:
    assert 0 <= text_seed("z" * 10_000) < 1_000_000
    assert text_seed("") == 0


def test_media_parts_change_the_hashed_input() -> None:
    text_only = Content.model_validate({"parts": [{"text": "describe this"}]})
    with_image = Content.model_validate(
        {
            "parts": [
                {"text": "describe this"},
                {"fileData": {"mimeType": "image/png", "fileUri": "gs://bucket/cat.png"}},
            ]
        }
    )

    assert embedding_input(text_only) == "describe this"
    assert "gs://bucket/cat.png" in embedding_input(with_image)
    assert embed_text(embedding_input(text_only)) != embed_text(embedding_input(with_image))
