from routedoc.project.graph import TypeGraph
from routedoc.types.detect import ARRAY_FINGERPRINT, ArrayExpansionDetector


def _object(names, index="number"):
    spec = {"kind": "object", "properties": {name: "any" for name in names}}
    if index is not None:
        spec["number_index"] = index
    return TypeGraph({}).handle(spec)


class TestStructuralFingerprint:
    def test_full_fingerprint_returns_index_type(self):
        element = ArrayExpansionDetector().expanded_element(_object(ARRAY_FINGERPRINT))
        assert element is not None
        assert element.text() == "number"

    def test_requires_number_index(self):
        assert ArrayExpansionDetector().expanded_element(_object(ARRAY_FINGERPRINT, index=None)) is None

    def test_plain_object_with_index(self):
        assert ArrayExpansionDetector().expanded_element(_object(["id", "name"])) is None

    def test_custom_ratio(self):
        detector = ArrayExpansionDetector(ratio=0.1)
        assert detector.expanded_element(_object(["length", "push"])) is not None


class TestTextualFingerprint:
    def test_symbol_members(self):
        detector = ArrayExpansionDetector()
        assert detector.has_expansion_noise("{ [Symbol.iterator]: () => IterableIterator<string> }")
        assert detector.has_expansion_noise("{ [ Symbol. unscopables ]: any }")

    def test_prototype_methods_as_keys(self):
        detector = ArrayExpansionDetector()
        assert detector.has_expansion_noise("{ length: number; push: (...items: string[]) => number }")
        assert detector.has_expansion_noise("{ forEach?: any }")

    def test_clean_text(self):
        detector = ArrayExpansionDetector()
        assert not detector.has_expansion_noise("{ id: number; tags: string[] }")
        assert detector.is_clean("{ id: number; tags: string[] }")


class TestDuplicateNullable:
    def test_repeated_undefined(self):
        assert ArrayExpansionDetector().has_duplicate_nullable("{ a: string | undefined | undefined }")

    def test_repeated_null(self):
        assert ArrayExpansionDetector().has_duplicate_nullable("string | null | number | null")

    def test_separate_properties_do_not_count(self):
        detector = ArrayExpansionDetector()
        assert not detector.has_duplicate_nullable("{ a: string | null; b: number | null }")
        assert detector.is_clean("{ a: string | null; b: number | null }")
