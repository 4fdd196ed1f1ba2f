from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Set

from AgentKinetics.processes import AgentProc


class ProcGraph():
    """
    Directed dependency graph for a system of coupled processes. An edge
    predecessor -> successor means the rate of the successor may change
    when the predecessor fires.
    """

    def __init__(self):
        # forward[p]: processes whose rates depend on p
        self._forward: Dict[AgentProc, Set[AgentProc]] = defaultdict(set)
        # reverse[p]: processes that determine the rate of p
        self._reverse: Dict[AgentProc, Set[AgentProc]] = defaultdict(set)

    @classmethod
    def from_processes(cls, processes: Iterable[AgentProc]) -> 'ProcGraph':
        """
        Links p -> q whenever an agent affected by p is one that the rate
        of q depends on.
        """
        processes = list(processes)
        graph = cls()

        by_agent = defaultdict(list)
        for proc in processes:
            for agent in proc.depends():
                by_agent[agent].append(proc)

        for predecessor in processes:
            for agent in predecessor.affects():
                for successor in by_agent[agent]:
                    if successor is not predecessor:
                        graph.link(predecessor, successor)
        return graph

    def link(self, predecessor: AgentProc, successor: AgentProc):
        if predecessor is successor:
            raise ValueError(
                f'A process cannot be linked to itself: {predecessor}')
        self._forward[predecessor].add(successor)
        self._reverse[successor].add(predecessor)

    def add(self, predecessor: AgentProc, successors: Iterable[AgentProc]):
        for successor in successors:
            self.link(predecessor, successor)

    def dependents(self, predecessor: AgentProc) -> FrozenSet[AgentProc]:
        return frozenset(self._forward.get(predecessor, ()))

    def predecessors(self, successor: AgentProc) -> FrozenSet[AgentProc]:
        return frozenset(self._reverse.get(successor, ()))

    def unlink(self, predecessor: AgentProc, successor: AgentProc):
        self._forward.get(predecessor, set()).discard(successor)
        self._reverse.get(successor, set()).discard(predecessor)

    def remove(self, process: AgentProc):
        """Removes every edge that touches a process."""
        for successor in self._forward.pop(process, set()):
            self._reverse[successor].discard(process)
        for predecessor in self._reverse.pop(process, set()):
            self._forward[predecessor].discard(process)

    def __len__(self) -> int:
        return sum(len(successors) for successors in self._forward.values())
