from AgentKinetics.agents import (Agent, AgentRegistry, OrdinalIndex,
                                  validate_agent_list, validate_ordinal_list)
from monty.json import MontyDecoder, MontyEncoder
import json
import pytest


def test_ordinal_index():
    ordinal_index = OrdinalIndex()
    assert ordinal_index.peek() == 0
    assert [ordinal_index.next() for _ in range(4)] == [0, 1, 2, 3]
    assert ordinal_index.peek() == 4

    ordinal_index.reset()
    assert ordinal_index.next() == 0

    # Independent counters never share state
    other = OrdinalIndex()
    assert other.next() == 0
    assert ordinal_index.next() == 1

    with pytest.raises(ValueError):
        OrdinalIndex(-1)


def test_agent():
    agent = Agent('A', 0)
    assert agent.name == 'A'
    assert agent.index == 0
    assert repr(agent) == 'A [0]'
    assert agent == Agent('A', 0)
    assert agent != Agent('A', 1)
    assert len({agent, Agent('A', 0), Agent('B', 1)}) == 2

    with pytest.raises(ValueError):
        Agent('A', -1)

    with pytest.raises(AttributeError):
        agent.index = 3


def test_agent_serialization():
    agent = Agent('Stem', 3)
    decoded = json.loads(json.dumps(agent, cls=MontyEncoder), cls=MontyDecoder)
    assert decoded == agent


def test_validate_agent_list():
    agents = [Agent(name, i) for i, name in enumerate('ABCDE')]
    validate_agent_list(agents)
    validate_agent_list([])

    # shuffled
    with pytest.raises(ValueError):
        validate_agent_list([agents[1], agents[0], *agents[2:]])

    # gapped
    with pytest.raises(ValueError):
        validate_agent_list([agents[0], agents[2]])

    # does not start at zero
    with pytest.raises(ValueError, match='process'):
        validate_ordinal_list(agents[1:], 'process')


def test_registry():
    registry = AgentRegistry()
    agents = [registry.register(name) for name in ['A', 'B', 'C']]

    assert [agent.index for agent in agents] == [0, 1, 2]
    assert len(registry) == 3
    assert registry.names == ['A', 'B', 'C']
    assert registry.get('B') is agents[1]
    assert registry.get(2) is agents[2]
    assert agents[0] in registry
    assert Agent('A', 1) not in registry
    validate_agent_list(registry.agents)

    with pytest.raises(ValueError):
        registry.register('A')
    with pytest.raises(KeyError):
        registry.get('D')
    with pytest.raises(KeyError):
        registry.get(3)
    with pytest.raises(KeyError):
        registry.get(-1)


def test_registry_from_names():
    registry = AgentRegistry.from_names(['X', 'Y'])
    assert [agent.index for agent in registry] == [0, 1]


def test_registry_shared_index():
    # A shared counter that was advanced elsewhere would leave a gap
    ordinal_index = OrdinalIndex()
    registry = AgentRegistry(ordinal_index)
    registry.register('A')
    ordinal_index.next()
    with pytest.raises(ValueError):
        registry.register('B')
