from sdsgen.data.spec_types import Function, Module, Requirements, Specification, module_key


def test_function_accepts_legacy_field_names():
    fn = Function.from_dict({"name": " login ", "description": "Sign in", "returns": "token", "parameters": "user, pw"})
    assert fn.name == "login"
    assert fn.purpose == "Sign in"
    assert fn.return_value == "token"
    assert fn.parameters == "user, pw"


def test_module_from_dict_skips_unnamed_functions():
    m = Module.from_dict({"name": "Auth", "functions": [{"name": "login"}, {"purpose": "?"}, "junk"]})
    assert [f.name for f in m.functions] == ["login"]
    assert not m.is_stub


def test_stub_module():
    stub = Module.stub("Billing")
    assert stub.is_stub
    assert stub.to_dict()["functions"] == []


def test_specification_fallback_fills_missing_fields():
    base = Specification(
        title="Shop",
        description="d",
        tech_stack={"name": "X"},
        requirements=Requirements(functional=["a"]),
    )
    spec = Specification.from_dict({"modules": [{"name": "Cart"}, {"description": "no name"}]}, fallback=base)
    assert spec.title == "Shop"
    assert spec.tech_stack == {"name": "X"}
    assert spec.requirements.functional == ["a"]
    assert spec.module_names == ["Cart"]


def test_to_dict_uses_camel_case():
    d = Specification(
        requirements=Requirements(non_functional=["fast"]),
        modules=[Module(name="M", functions=[Function(name="f", design_spec="x", test_cases=["t"])])],
    ).to_dict()
    fn = d["modules"][0]["functions"][0]
    assert fn["designSpec"] == "x"
    assert fn["testCases"] == ["t"]
    assert d["requirements"]["nonFunctional"] == ["fast"]
    assert d["techStack"] is None


def test_module_key_normalizes_case_and_spacing():
    assert module_key("  User   Management ") == module_key("user management")
