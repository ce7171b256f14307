"""Tests for k8ssdm merge helpers."""

from k8ssdm.merge import get_in, merge_defaults, set_in


class TestMergeDefaults:
    def test_existing_none(self):
        defaults = {"a": [1]}
        merged = merge_defaults(None, defaults)
        assert merged == {"a": [1]}
        assert merged is not defaults

    def test_adds_missing_keys(self):
        assert merge_defaults({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_existing_scalar_wins(self):
        assert merge_defaults({"a": "mine"}, {"a": "default"}) == {"a": "mine"}

    def test_existing_none_value_replaced(self):
        assert merge_defaults({"a": None}, {"a": "default"}) == {"a": "default"}

    def test_nested(self):
        existing = {"metadata": {"annotations": {"x": "1"}, "name": "n"}}
        defaults = {"metadata": {"annotations": {"x": "2", "y": "3"}}}
        assert merge_defaults(existing, defaults) == {
            "metadata": {"annotations": {"x": "1", "y": "3"}, "name": "n"},
        }

    def test_lists_concatenated(self):
        assert merge_defaults({"env": [{"name": "A"}]}, {"env": [{"name": "B"}]}) == {
            "env": [{"name": "A"}, {"name": "B"}],
        }

    def test_inputs_untouched(self):
        existing = {"env": [{"name": "A"}], "meta": {"x": "1"}}
        defaults = {"env": [{"name": "B"}], "meta": {"y": "2"}}
        merge_defaults(existing, defaults)
        assert existing == {"env": [{"name": "A"}], "meta": {"x": "1"}}
        assert defaults == {"env": [{"name": "B"}], "meta": {"y": "2"}}


class TestGetSetIn:
    def test_get_in(self):
        data = {"spec": {"template": {"spec": {"containers": []}}}}
        assert get_in(data, "spec.template.spec") == {"containers": []}
        assert get_in(data, ["spec", "missing"], "x") == "x"
        assert get_in(None, "spec", {}) == {}

    def test_set_in_creates_path(self):
        assert set_in(None, "spec.template.spec", {"a": 1}) == {
            "spec": {"template": {"spec": {"a": 1}}},
        }

    def test_set_in_preserves_siblings(self):
        data = {"spec": {"replicas": 2, "template": {"metadata": {}}}}
        result = set_in(data, ("spec", "template", "spec"), {"a": 1})
        assert result["spec"]["replicas"] == 2
        assert result["spec"]["template"]["metadata"] == {}
        assert "spec" not in data["spec"]["template"]
