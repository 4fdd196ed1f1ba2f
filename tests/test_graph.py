from AgentKinetics.agents import AgentRegistry
from AgentKinetics.graph import ProcGraph
from AgentKinetics.processes import (BirthProc, CappedProc, DeathProc,
                                     TransitionProc)
import pytest

REGISTRY = AgentRegistry.from_names(['A', 'B', 'C'])
A, B, C = REGISTRY.agents


def test_from_processes():
    birth_a = BirthProc(0, A, A, 1.0)
    death_a = DeathProc(1, A, 1.0)
    a_to_b = TransitionProc(2, A, B, 1.0)
    death_b = DeathProc(3, B, 1.0)
    birth_c = BirthProc(4, C, C, 1.0)

    graph = ProcGraph.from_processes([birth_a, death_a, a_to_b, death_b, birth_c])

    assert graph.dependents(birth_a) == {death_a, a_to_b}
    assert graph.dependents(death_a) == {birth_a, a_to_b}
    # The transition removes A and adds B
    assert graph.dependents(a_to_b) == {birth_a, death_a, death_b}
    assert graph.dependents(death_b) == set()
    assert graph.dependents(birth_c) == set()

    assert graph.predecessors(death_b) == {a_to_b}
    assert len(graph) == 7


def test_capped_dependencies():
    # Births of B fill the capacity shared by A and B
    capped_a = CappedProc(BirthProc(0, A, A, 1.0), [A, B], 10)
    birth_b = BirthProc(1, B, B, 1.0)

    graph = ProcGraph.from_processes([capped_a, birth_b])
    assert graph.dependents(birth_b) == {capped_a}
    assert graph.dependents(capped_a) == set()


def test_link_and_remove():
    procs = [DeathProc(i, A, 1.0) for i in range(3)]
    graph = ProcGraph()
    graph.add(procs[0], procs[1:])
    graph.link(procs[1], procs[2])

    with pytest.raises(ValueError):
        graph.link(procs[0], procs[0])

    assert graph.dependents(procs[0]) == {procs[1], procs[2]}
    assert graph.predecessors(procs[2]) == {procs[0], procs[1]}

    graph.unlink(procs[0], procs[1])
    assert graph.dependents(procs[0]) == {procs[2]}

    graph.remove(procs[2])
    assert graph.dependents(procs[0]) == set()
    assert graph.dependents(procs[1]) == set()
    assert len(graph) == 0
