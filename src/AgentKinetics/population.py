from collections import Counter
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from AgentKinetics.agents import Agent

AgentCounts = Union[Mapping[Agent, int], Iterable[Agent]]


def _as_counter(agents: AgentCounts) -> Counter:
    """
    Converts either a mapping of agent -> count or an iterable of agents
    (one entry per instance) into a Counter.
    """
    if isinstance(agents, Mapping):
        counts = Counter()
        for agent, count in agents.items():
            counts[agent] += count
        return counts
    return Counter(agents)


class AgentPopulation():
    """
    Maintains the number of instances of each agent in a stochastic
    simulation. Agents that were never added have a count of zero.

    Counts can never become negative. Any operation that would drive a
    count below zero raises a ValueError and leaves the population
    unchanged.

    Args:
        counts: The initial census, either as a mapping of agent -> count
            or as an iterable with one entry per agent instance.
    """

    def __init__(self, counts: Optional[AgentCounts] = None):
        self._counts: Dict[Agent, int] = {}
        if counts is not None:
            for agent, count in _as_counter(counts).items():
                self.set(agent, count)

    def count(self, agent: Agent) -> int:
        return self._counts.get(agent, 0)

    def count_agents(self, agents: Iterable[Agent]) -> int:
        return sum(self.count(agent) for agent in agents)

    def total(self) -> int:
        return sum(self._counts.values())

    def add(self, agent: Agent, count: int = 1):
        if count < 0:
            raise ValueError('Agent count must be non-negative')
        self._counts[agent] = self.count(agent) + count

    def remove(self, agent: Agent, count: int = 1):
        if count < 0:
            raise ValueError('Agent count must be non-negative')
        current = self.count(agent)
        if current < count:
            raise ValueError(
                f'Agent count must remain non-negative: cannot remove {count} '
                f'of {agent} from a population of {current}')
        self._counts[agent] = current - count

    def set(self, agent: Agent, count: int):
        if count < 0:
            raise ValueError('Agent count must be non-negative')
        self._counts[agent] = count

    def add_all(self, agents: AgentCounts):
        """
        Adds a batch of agents. Every entry is checked before any count
        is changed.
        """
        counts = _as_counter(agents)
        for agent, count in counts.items():
            if count < 0:
                raise ValueError('Agent count must be non-negative')
        for agent, count in counts.items():
            self._counts[agent] = self.count(agent) + count

    def remove_all(self, agents: AgentCounts):
        """
        Removes a batch of agents. The batch is validated against the
        final inventory, so the population is untouched if any agent
        would go negative.
        """
        counts = _as_counter(agents)
        for agent, count in counts.items():
            if count < 0:
                raise ValueError('Agent count must be non-negative')
            if self.count(agent) < count:
                raise ValueError(
                    f'Agent count must remain non-negative: cannot remove '
                    f'{count} of {agent} from a population of '
                    f'{self.count(agent)}')
        for agent, count in counts.items():
            self._counts[agent] = self.count(agent) - count

    def agents(self):
        return [agent for agent, count in self._counts.items() if count > 0]

    def to_array(self, agents: Sequence[Agent]) -> np.ndarray:
        """
        Returns the counts as an integer vector aligned with the given
        (ordinally indexed) agent list.
        """
        return np.array([self.count(agent) for agent in agents], dtype=int)

    def counts(self) -> Dict[Agent, int]:
        return {agent: count for agent, count in self._counts.items() if count > 0}

    def copy(self) -> 'AgentPopulation':
        return AgentPopulation(self.counts())

    def __eq__(self, other) -> bool:
        if not isinstance(other, AgentPopulation):
            return NotImplemented
        return self.counts() == other.counts()

    def __str__(self) -> str:
        items = ', '.join(f'{agent.name}: {count}' for agent, count in
                          sorted(self.counts().items(), key=lambda x: x[0].index))
        return f'AgentPopulation({{{items}}})'

    def __repr__(self) -> str:
        return self.__str__()
