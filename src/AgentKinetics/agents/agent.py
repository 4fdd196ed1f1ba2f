from monty.json import MSONable
from typing import Dict, Iterable, List, Optional, Sequence


class OrdinalIndex():
    """
    A caller-owned counter that hands out dense, zero-based ordinal
    indices. Use one instance per class of ordinal objects (e.g. one for
    agents and one for processes).

    Args:
        start (int): The first index to hand out.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError('Ordinal indices must start at a non-negative value')
        self._next = start

    def next(self) -> int:
        index = self._next
        self._next += 1
        return index

    def peek(self) -> int:
        return self._next

    def reset(self, start: int = 0):
        if start < 0:
            raise ValueError('Ordinal indices must start at a non-negative value')
        self._next = start


class Agent(MSONable):
    """
    Class to represent a distinguishable kind of entity in a stochastic
    simulation (e.g. a cell phenotype). The agent does not represent a
    single individual, but the identity whose instances are counted in an
    AgentPopulation.

    Args:
        name (str): The name of the agent
        index (int): The ordinal index of the agent. Agents held in a
            system must satisfy agents[k].index == k.
    """

    def __init__(self, name: str, index: int):
        if index < 0:
            raise ValueError('Agent index must be non-negative')
        self._name = name
        self._index = index

    @property
    def name(self) -> str:
        return self._name

    @property
    def index(self) -> int:
        return self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, Agent):
            return NotImplemented
        return self._index == other._index and self._name == other._name

    def __hash__(self) -> int:
        return hash((self._index, self._name))

    def __str__(self) -> str:
        return f'{self.name} [{self.index}]'

    def __repr__(self) -> str:
        return self.__str__()


def validate_ordinal_list(items: Sequence, kind: str = 'item') -> None:
    """
    Ensures that a sequence of ordinal objects can be used as an
    indexed array, i.e. items[k].index == k for every k.

    Args:
        items: The ordinal objects to check. Each must expose an
            ``index`` attribute.
        kind: A label used in the error message.

    Raises:
        ValueError: If any item is out of place.
    """
    for k, item in enumerate(items):
        if item.index != k:
            raise ValueError(
                f'Invalid {kind} list: expected index {k} at position {k}, '
                f'found index {item.index} ({item})')


def validate_agent_list(agents: Sequence[Agent]) -> None:
    validate_ordinal_list(agents, 'agent')


class AgentRegistry():
    """
    Assigns ordinal indices to agents as they are created during model
    setup and keeps them addressable by index and by name.
    """

    def __init__(self, ordinal_index: Optional[OrdinalIndex] = None):
        if ordinal_index is None:
            ordinal_index = OrdinalIndex()
        self.ordinal_index = ordinal_index
        self._agents: List[Agent] = []
        self._by_name: Dict[str, Agent] = {}

    @classmethod
    def from_names(cls, names: Iterable[str]) -> 'AgentRegistry':
        registry = cls()
        for name in names:
            registry.register(name)
        return registry

    def register(self, name: str) -> Agent:
        if name in self._by_name:
            raise ValueError(f'Agent {name} is already registered')

        agent = Agent(name, self.ordinal_index.next())
        self._agents.append(agent)
        self._by_name[name] = agent

        # An externally shared ordinal index may have been advanced
        validate_agent_list(self._agents)
        return agent

    def get(self, key) -> Agent:
        if isinstance(key, str):
            return self._by_name[key]
        if 0 <= key < len(self._agents):
            return self._agents[key]
        raise KeyError(f'Invalid agent index: [{key}]')

    def __contains__(self, agent: Agent) -> bool:
        return (0 <= agent.index < len(self._agents)
                and self._agents[agent.index] == agent)

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self):
        return iter(self._agents)

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents)

    @property
    def names(self) -> List[str]:
        return [agent.name for agent in self._agents]
