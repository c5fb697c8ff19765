from termsexp.declarations import Constructor, Declaration, Definition, Inductive
from termsexp.exprs import App, BVar, Const, Lam, Let, MData, NatLit, Pi, Proj, Sort, mk_app
from termsexp.levels import LevelZero
from termsexp.names import Name
from termsexp.sharing import (
    count_subterms,
    declaration_terms,
    measure_declarations,
    measure_sharing,
    shared_subterms,
)


def _fan_in(depth: int):
    """x_k = x_{k-1} x_{k-1}: 2**depth paths, depth distinct applications."""

    nodes = [Const(Name.parse("f"))]
    for _ in range(depth):
        nodes.append(App(nodes[-1], nodes[-1]))
    return nodes


def test_leaves_are_not_tracked():
    assert count_subterms({}, Const(Name.parse("c"))) == {}
    assert count_subterms({}, BVar(0)) == {}
    assert count_subterms({}, Sort(LevelZero())) == {}

    leaf = NatLit(1)
    app = App(leaf, leaf)
    assert count_subterms({}, app) == {app: 0}


def test_fan_in_dag_is_counted_per_distinct_node():
    depth = 200
    nodes = _fan_in(depth)

    tally = count_subterms({}, nodes[-1])

    assert len(tally) == depth
    assert tally[nodes[-1]] == 0
    for node in nodes[1:-1]:
        # each node is referenced twice by its single parent
        assert tally[node] == 1


def test_revisited_node_is_not_descended_again():
    nat = Const(Name.parse("Nat"))
    inner = Pi(nat, nat)
    shared = Lam(inner, BVar(0))
    root = mk_app(Const(Name.parse("f")), shared, shared, shared)

    tally = count_subterms({}, root)

    assert tally[shared] == 2
    assert tally[inner] == 0
    assert shared_subterms(tally) == [(shared, 2)]


def test_internal_kinds_are_all_recorded():
    body = Lam(BVar(0), BVar(0))
    let = Let(body, body, Proj(Name.parse("Prod"), 0, MData(body)))

    tally = count_subterms({}, let)

    proj = let.body
    assert tally[let] == 0
    assert tally[proj] == 0
    assert tally[proj.struct] == 0
    assert tally[body] == 2


def test_identity_not_structure_keys_the_tally():
    left = Lam(BVar(0), BVar(0))
    right = Lam(BVar(0), BVar(0))
    tally = count_subterms({}, App(left, right))
    assert tally[left] == 0
    assert tally[right] == 0


def test_tally_is_threaded_across_calls():
    shared = Lam(BVar(0), BVar(0))
    tally = count_subterms({}, App(shared, NatLit(1)))
    tally = count_subterms(tally, App(shared, NatLit(2)))
    assert tally[shared] == 1


def test_long_spines_do_not_exhaust_the_stack():
    args = [NatLit(i) for i in range(5000)]
    root = mk_app(Const(Name.parse("f")), *args)
    assert len(count_subterms({}, root)) == 5000


def test_measure_sharing():
    nodes = _fan_in(10)
    metrics = measure_sharing(nodes[-1])
    assert metrics.distinct == 10
    assert metrics.shared == 9
    assert metrics.revisits == 9


def test_declaration_terms_and_module_metrics():
    nat = Const(Name.parse("Nat"))
    shared = Pi(nat, nat)
    succ = Declaration(Name.parse("Nat.succ"), shared, Constructor(Name.parse("Nat")))
    ind = Declaration(Name.parse("Nat"), Sort(LevelZero()), Inductive((succ,)))
    defn = Declaration(Name.parse("f"), shared, Definition(Lam(nat, BVar(0))))

    assert declaration_terms(ind) == [ind.type, shared]
    assert declaration_terms(defn) == [shared, defn.payload.value]

    metrics = measure_declarations([ind, defn])
    assert metrics.distinct == 2
    assert metrics.shared == 1
    assert metrics.revisits == 1
