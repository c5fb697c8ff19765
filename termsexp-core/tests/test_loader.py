import json

import pytest

from termsexp.declarations import Axiom, Constructor, Definition, Inductive, QuotInfo, QuotKind, Theorem
from termsexp.exprs import App, Const, Lam, MData, Sort, app_spine
from termsexp.loader import ModuleFormatError, load_module, load_module_file
from termsexp.names import Name


def _dump() -> dict:
    return {
        "module": "n_mod",
        "names": {
            "n_mod": {"str": "Demo"},
            "n_nat": {"str": "Nat"},
            "n_zero": {"parent": "n_nat", "str": "zero"},
            "n_id": {"parent": "n_mod", "str": "id"},
            "n_thm": {"parent": "n_mod", "str": "thm"},
            "n_aux": {"parent": "n_mod", "str": "_aux"},
            "n_quot": {"str": "Quot"},
            "n_u": {"str": "u", "hash": 42},
        },
        "levels": {
            "l0": {"kind": "zero"},
            "l1": {"kind": "succ", "of": "l0"},
            "lu": {"kind": "param", "name": "n_u"},
        },
        "exprs": {
            "e_type": {"kind": "sort", "level": "l1"},
            "e_nat": {"kind": "const", "name": "n_nat", "levels": []},
            "e_x": {"kind": "bvar", "index": 0},
            "e_id": {"kind": "lam", "type": "e_nat", "body": "e_x"},
            "e_idty": {"kind": "pi", "type": "e_nat", "body": "e_nat"},
            "e_app": {"kind": "app", "fn": "e_id", "arg": "e_lit"},
            "e_lit": {"kind": "natlit", "value": 3},
            "e_md": {"kind": "mdata", "expr": "e_app", "data": {"pp": True}},
        },
        "declarations": [
            {
                "name": "n_nat",
                "type": "e_type",
                "kind": "inductive",
                "constructors": [
                    {"name": "n_zero", "type": "e_nat", "kind": "constructor", "induct": "n_nat"}
                ],
            },
            {"name": "n_id", "type": "e_idty", "kind": "definition", "value": "e_id"},
            {"name": "n_thm", "type": "e_nat", "kind": "theorem", "value": "e_md"},
            {"name": "n_aux", "type": "e_nat", "kind": "axiom"},
            {"name": "n_quot", "type": "e_type", "kind": "quot", "quot_kind": "type", "type_name": "n_quot"},
        ],
    }


def test_load_module_materializes_declarations():
    module = load_module(_dump())

    assert module.name == Name.parse("Demo")
    assert [str(d.name) for d in module.declarations] == ["Nat", "Demo.id", "Demo.thm", "Demo._aux", "Quot"]

    nat, ident, thm, aux, quot = module.declarations
    assert isinstance(nat.payload, Inductive)
    assert isinstance(nat.payload.constructors[0].payload, Constructor)
    assert isinstance(ident.payload, Definition)
    assert isinstance(ident.payload.value, Lam)
    assert isinstance(thm.payload, Theorem)
    assert isinstance(thm.payload.value, MData)
    assert isinstance(aux.payload, Axiom)
    assert quot.payload == QuotInfo(QuotKind.TYPE, Name.parse("Quot"))
    assert isinstance(nat.type, Sort)


def test_shared_records_become_shared_objects():
    module = load_module(_dump())
    _, ident, thm, _, _ = module.declarations

    app = thm.payload.value.expr
    assert isinstance(app, App)
    assert app.fn is ident.payload.value
    assert ident.type.binder_type is ident.type.body
    assert isinstance(ident.type.body, Const)


def test_explicit_name_hash_is_kept():
    payload = _dump()
    payload["exprs"]["e_poly"] = {"kind": "const", "name": "n_nat", "levels": ["lu"]}
    payload["declarations"].append({"name": "n_u", "type": "e_poly", "kind": "axiom"})

    decl = load_module(payload).declarations[-1]

    assert decl.name.hash == 42
    assert decl.type.levels[0].name.hash == 42


def test_missing_module_name_is_anonymous():
    module = load_module({"declarations": []})
    assert module.name.is_anonymous
    assert module.declarations == []


def test_unknown_reference_is_reported():
    payload = _dump()
    payload["exprs"]["e_id"]["body"] = "e_missing"
    with pytest.raises(ModuleFormatError, match="unknown exprs id 'e_missing'"):
        load_module(payload)


def test_cyclic_records_are_rejected():
    payload = _dump()
    payload["exprs"]["e_loop"] = {"kind": "app", "fn": "e_loop", "arg": "e_lit"}
    payload["declarations"].append({"name": "n_id", "type": "e_loop", "kind": "axiom"})
    with pytest.raises(ModuleFormatError, match="cyclic"):
        load_module(payload)


def test_unknown_kinds_are_rejected():
    payload = _dump()
    payload["exprs"]["e_x"] = {"kind": "weird"}
    with pytest.raises(ModuleFormatError, match="unknown kind 'weird'"):
        load_module(payload)

    payload = _dump()
    payload["declarations"][3]["kind"] = "mystery"
    with pytest.raises(ModuleFormatError, match="unknown declaration kind"):
        load_module(payload)

    payload = _dump()
    payload["declarations"][4]["quot_kind"] = "nope"
    with pytest.raises(ModuleFormatError, match="unknown quotient kind"):
        load_module(payload)


def test_malformed_records_are_rejected():
    payload = _dump()
    del payload["exprs"]["e_id"]["type"]
    with pytest.raises(ModuleFormatError, match="malformed exprs record 'e_id'"):
        load_module(payload)

    payload = _dump()
    del payload["declarations"][1]["value"]
    with pytest.raises(ModuleFormatError, match="missing field"):
        load_module(payload)

    with pytest.raises(ModuleFormatError, match="JSON object"):
        load_module([])


def test_load_module_file(tmp_path):
    path = tmp_path / "demo.json"
    path.write_text(json.dumps(_dump()))

    module = load_module_file(path)
    assert len(module.declarations) == 5

    with pytest.raises(FileNotFoundError):
        load_module_file(tmp_path / "missing.json")


def _spine_dump(length: int) -> dict:
    exprs = {
        "e_f": {"kind": "const", "name": "n_f"},
        "e_one": {"kind": "natlit", "value": 1},
        "e_prop": {"kind": "sort", "level": "l0"},
    }
    fn = "e_f"
    for idx in range(length):
        exprs[f"e_app{idx}"] = {"kind": "app", "fn": fn, "arg": "e_one"}
        fn = f"e_app{idx}"
    return {
        "names": {"n_f": {"str": "f"}},
        "levels": {"l0": {"kind": "zero"}},
        "exprs": exprs,
        "declarations": [{"name": "n_f", "type": "e_prop", "kind": "definition", "value": fn}],
    }


def test_long_application_spines_load_without_recursion():
    module = load_module(_spine_dump(5000))

    value = module.declarations[0].payload.value
    fn, args = app_spine(value)
    assert isinstance(fn, Const)
    assert len(args) == 5000
    assert all(arg is args[0] for arg in args)


def test_spine_arguments_referring_back_into_the_spine_are_cyclic():
    payload = _spine_dump(3)
    payload["exprs"]["e_app0"]["arg"] = "e_app2"
    with pytest.raises(ModuleFormatError, match="cyclic exprs record 'e_app2'"):
        load_module(payload)


def test_bad_scalar_fields_name_the_record():
    payload = _dump()
    payload["exprs"]["e_proj"] = {"kind": "proj", "type_name": "n_nat", "index": "x", "struct": "e_x"}
    payload["declarations"].append({"name": "n_id", "type": "e_proj", "kind": "axiom"})
    with pytest.raises(ModuleFormatError, match="malformed exprs record 'e_proj'"):
        load_module(payload)

    payload = _dump()
    payload["names"]["n_u"]["hash"] = "abc"
    payload["declarations"].append({"name": "n_u", "type": "e_nat", "kind": "axiom"})
    with pytest.raises(ModuleFormatError, match="malformed names record 'n_u'"):
        load_module(payload)

    payload = _dump()
    payload["exprs"]["e_md"]["data"] = ["pp"]
    with pytest.raises(ModuleFormatError, match="malformed exprs record 'e_md'"):
        load_module(payload)
