import json

import pytest

from cardgame.cards import (
    CardEffect,
    CardHandler,
    CountRestriction,
    Expression,
    StaticCardData,
    parse_card_set,
    setup_from_directory,
)


def test_expression_from_dict_nested():
    expr = Expression.from_dict(
        {
            "kind": "OPERATOR",
            "operator": "+",
            "args": [{"kind": "CONSTANT", "val": 2}, {"kind": "VARIABLE", "variable": "x"}],
        }
    )
    assert expr.kind == "OPERATOR"
    assert expr.operator == "+"
    assert [a.kind for a in expr.args] == ["CONSTANT", "VARIABLE"]
    assert expr.args[0].val == 2
    assert expr.args[1].variable == "x"


def test_count_restriction_defaults_to_zero():
    assert CountRestriction.from_dict(None) == CountRestriction(0, 0)
    assert CountRestriction.from_dict({"atLeast": 1, "atMost": 3}) == CountRestriction(1, 3)


def test_card_effect_from_dict():
    effect = CardEffect.from_dict(
        {
            "kind": "THEN",
            "args": [
                {
                    "kind": "DRAW",
                    "cardFilter": {
                        "kind": "PILE",
                        "pile": "DECK",
                        "type": "SPELL",
                        "count": {"atLeast": 1, "atMost": 2},
                    },
                }
            ],
        }
    )
    draw = effect.args[0]
    assert draw.kind == "DRAW"
    assert draw.card_filter.pile == "DECK"
    assert draw.card_filter.card_type == "SPELL"
    assert draw.card_filter.count == CountRestriction(1, 2)


def test_from_dict_rejects_non_object():
    with pytest.raises(ValueError):
        Expression.from_dict([1, 2])


def test_parse_card_set_fields_and_aliases():
    text = json.dumps(
        [
            {"name": "Knight", "imageSrc": "knight.png"},
            {"imageSrc": "copy.png", "alias": {"set": "base", "id": 0}},
        ]
    )
    (knight, knight_alias), (copy, copy_alias) = parse_card_set(text)
    assert knight.name == "Knight" and knight.image_src == "knight.png"
    assert knight_alias is None
    assert copy.name == ""
    assert (copy_alias.set_name, copy_alias.id) == ("base", 0)


def test_parse_card_set_empty_alias_set_means_no_alias():
    [(card, alias)] = parse_card_set('[{"imageSrc": "a.png", "alias": {"set": "", "id": 3}}]')
    assert alias is None
    assert card.alias is None


def test_parse_card_set_rejects_non_array():
    with pytest.raises(ValueError):
        parse_card_set('{"name": "x"}')


def test_parse_card_set_rejects_bad_json():
    with pytest.raises(ValueError):
        parse_card_set("not json")


def test_setup_from_directory_resolves_aliases(tmp_path):
    (tmp_path / "base.json").write_text(
        json.dumps([{"name": "Zero", "imageSrc": "0.png"}, {"name": "One", "imageSrc": "1.png"}])
    )
    (tmp_path / "promo.json").write_text(
        json.dumps([{"name": "Shiny", "imageSrc": "s.png", "alias": {"set": "base", "id": 1}}])
    )
    handler = setup_from_directory(tmp_path)
    assert handler.set_names() == ["base", "promo"]
    assert handler.get("base", 0).name == "Zero"
    assert handler.get("promo", 0).alias is handler.get("base", 1)
    assert handler.get("base", 1).alias is None


def test_setup_from_directory_bad_file_gives_empty_set(tmp_path):
    (tmp_path / "broken.json").write_text("not json")
    handler = setup_from_directory(tmp_path)
    assert handler.set_names() == ["broken"]
    with pytest.raises(IndexError):
        handler.get("broken", 0)


def test_setup_from_directory_unknown_alias_raises(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps([{"imageSrc": "x", "alias": {"set": "missing", "id": 0}}]))
    with pytest.raises(ValueError):
        setup_from_directory(tmp_path)


def test_setup_from_directory_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        setup_from_directory(tmp_path / "nowhere")


def test_card_handler_lookup_errors():
    handler = CardHandler({"base": [StaticCardData(name="Only")]})
    assert handler.get("base", 0).name == "Only"
    with pytest.raises(KeyError):
        handler.get("other", 0)
    with pytest.raises(IndexError):
        handler.get("base", -1)