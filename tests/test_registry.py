import logging

from cloud_categories.collection import ListDecoderRegistry, Loaded, ModelList

from sample_models import Comment


class TagDecoder:
    def __init__(self, tag, *, claims=True, error=None, sniff_error=None):
        self.tag = tag
        self.claims = claims
        self.error = error
        self.sniff_error = sniff_error
        self.calls = 0

    def should_decode(self, payload):
        if self.sniff_error is not None:
            raise self.sniff_error
        return self.claims

    def decode(self, payload, model_type, registry):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ModelList(model_type, [model_type(id=self.tag, content=self.tag)])


def test_empty_registry_decodes_bare_array(registry):
    result = registry.decode([{"id": "c1", "content": "a"}, {"id": "c2", "content": "b"}], Comment)
    assert [comment.id for comment in result] == ["c1", "c2"]
    assert isinstance(result.source, Loaded)


def test_json_text_is_parsed(registry):
    result = registry.decode('[{"id": "c1", "content": "a"}]', Comment)
    assert result[0].content == "a"


def test_first_registered_decoder_wins(registry):
    first = TagDecoder("first")
    second = TagDecoder("second")
    registry.register(first)
    registry.register(second)

    result = registry.decode({"anything": True}, Comment)

    assert [comment.id for comment in result] == ["first"]
    assert first.calls == 1
    assert second.calls == 0
    assert registry.decoders == (first, second)


def test_declining_decoder_is_skipped(registry):
    registry.register(TagDecoder("skip", claims=False))
    registry.register(TagDecoder("used"))
    assert registry.decode({}, Comment)[0].id == "used"


def test_unclaimed_non_array_degrades_to_empty(registry):
    result = registry.decode({"unexpected": "shape"}, Comment)
    assert len(result) == 0
    assert isinstance(result.source, Loaded)


def test_unparseable_payload_degrades_to_empty(registry):
    assert len(registry.decode("{broken", Comment)) == 0


def test_malformed_element_degrades_to_empty(registry):
    assert len(registry.decode([{"id": "c1"}], Comment)) == 0


def test_failing_decoder_degrades_to_empty(registry, caplog):
    registry.register(TagDecoder("boom", error=ValueError("bad page")))
    with caplog.at_level(logging.DEBUG, logger="cloud_categories.collection.registry"):
        result = registry.decode({}, Comment)
    assert len(result) == 0
    assert "bad page" in caplog.text


def test_registries_are_independent():
    one = ListDecoderRegistry()
    two = ListDecoderRegistry()
    one.register(TagDecoder("only-one"))
    assert two.decoders == ()
    assert len(two.decode({}, Comment)) == 0


def test_unexpected_decoder_error_degrades_to_empty(registry):
    registry.register(TagDecoder("boom", error=RuntimeError("constructor blew up")))
    result = registry.decode({}, Comment)
    assert len(result) == 0
    assert isinstance(result.source, Loaded)


def test_failing_sniff_counts_as_no_match(registry):
    broken = TagDecoder("broken", sniff_error=RuntimeError("sniff blew up"))
    registry.register(broken)
    registry.register(TagDecoder("next"))

    result = registry.decode({"x": 1}, Comment)

    assert [comment.id for comment in result] == ["next"]
    assert broken.calls == 0


def test_failing_sniff_falls_back_to_array(registry):
    registry.register(TagDecoder("broken", sniff_error=AttributeError("no such thing")))
    result = registry.decode([{"id": "c1", "content": "a"}], Comment)
    assert [comment.id for comment in result] == ["c1"]


def test_deeply_nested_payload_degrades_to_empty(registry):
    depth = 100000
    assert len(registry.decode("[" * depth + "]" * depth, Comment)) == 0

    nested = []
    for _ in range(100000):
        nested = [nested]
    assert len(registry.decode(nested, Comment)) == 0


def test_non_finite_number_degrades_to_empty(registry):
    assert len(registry.decode('[{"id": "c1", "content": "a", "score": NaN}]', Comment)) == 0
