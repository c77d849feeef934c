from __future__ import annotations

from proxydeob.js_ast import parse_program
from proxydeob.passes.inline_aliases import AliasInliner, collect_aliases


def _inline(schema, source: str):
    tree = parse_program(source)
    aliases = collect_aliases(tree.root, schema)
    inliner = AliasInliner(schema, aliases)
    return inliner.inline(tree), aliases, inliner


def test_read_is_replaced_and_assignment_kept(schema) -> None:
    tree, aliases, inliner = _inline(schema, "a.G.x = compute();\nlater(a.G.x);")

    assert set(aliases) == {"x"}
    assert tree.code == "a.G.x = compute();\nlater(compute());"
    assert inliner.inlined == 1


def test_every_read_gets_its_own_copy(schema) -> None:
    tree, _, inliner = _inline(schema, "a.G.x = compute(/* n */ 1);\nf(a.G.x, a.G.x);")

    assert tree.code.endswith("f(compute(/* n */ 1), compute(/* n */ 1));")
    assert inliner.inlined == 2


def test_last_assignment_wins(schema) -> None:
    tree, _, _ = _inline(schema, "a.G.x = one();\na.G.x = two();\nuse(a.G.x);")
    assert tree.code.endswith("use(two());")


def test_declaration_order_does_not_matter(schema) -> None:
    tree, _, _ = _inline(schema, "function g() { return a.G.k; }\na.G.k = 7;")
    assert tree.code.startswith("function g() { return 7; }")


def test_unknown_keys_are_left_alone(schema) -> None:
    tree, _, inliner = _inline(schema, "use(a.G.missing);")
    assert tree.code == "use(a.G.missing);"
    assert inliner.inlined == 0


def test_write_positions_are_protected(schema) -> None:
    source = "a.G.x = v();\na.G.x++;\ndelete a.G.x;\na.G.x += 2;"
    tree, _, inliner = _inline(schema, source)

    assert tree.code == source
    assert inliner.skipped_writes == 4


def test_nested_aliases_are_expanded(schema) -> None:
    tree, _, _ = _inline(schema, "a.G.b = base();\na.G.w = wrap(a.G.b);\nuse(a.G.w);")
    assert tree.code.endswith("use(wrap(base()));")


def test_self_reference_does_not_loop(schema) -> None:
    tree, _, inliner = _inline(schema, "a.G.x = a.G.x + 1;\nuse(a.G.x);")

    assert tree.code == "a.G.x = a.G.x + 1;\nuse(a.G.x + 1);"
    assert inliner.cycles >= 1


def test_mutual_references_stop_at_the_cycle(schema) -> None:
    tree, _, _ = _inline(schema, "a.G.p = q(a.G.r);\na.G.r = p(a.G.p);\nuse(a.G.p);")
    assert tree.code.endswith("use(q(p(a.G.p)));")


def test_inlined_expressions_keep_their_precedence(schema) -> None:
    source = (
        "a.G.s = p + q;\n"
        "a.G.o = {k: 1};\n"
        "a.G.f = (v) => v * 2;\n"
        "use(a.G.s * 2, [a.G.s], a.G.o.k, a.G.f(3));\n"
        "a.G.o;"
    )
    tree, _, _ = _inline(schema, source)

    assert tree.code.splitlines()[-2:] == [
        "use((p + q) * 2, [p + q], ({k: 1}).k, ((v) => v * 2)(3));",
        "({k: 1});",
    ]
    assert not tree.root.has_error


def test_aliases_in_modern_syntax(schema) -> None:
    source = "a.G.d = cfg?.opts ?? {};\nclass C { o = a.G.d; }\n// done\n"
    tree, _, inliner = _inline(schema, source)

    assert tree.code == "a.G.d = cfg?.opts ?? {};\nclass C { o = cfg?.opts ?? {}; }\n// done\n"
    assert inliner.inlined == 1
