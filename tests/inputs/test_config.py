from AgentKinetics.inputs import ModelBuilder, SimulationConfig
from AgentKinetics.processes import (BirthProc, CappedProc, DeathProc,
                                     TransitionProc)
from pathlib import Path
import pytest

MODULE_DIR = Path(__file__).absolute().parent
TEST_FILE_DIR = MODULE_DIR / '..' / 'test_files' / 'birth_death'


def test_model_builder():
    builder = ModelBuilder()
    a = builder.add_agent('A')
    b = builder.add_agent('B')

    birth = builder.birth('A', 'A', 2.0)
    death = builder.death('A', 0.5)
    transition = builder.transition('A', 'B', 1.0)
    capped = builder.capped({
        'type': 'birth',
        'parent': 'B',
        'child': 'B',
        'rate_constant': 1.0
    }, ['A', 'B'], 50)

    assert [proc.index for proc in builder.processes] == [0, 1, 2, 3]
    assert isinstance(capped.base, BirthProc)
    assert capped.base.parent is b
    assert capped.capped_agents == [a, b]
    assert birth.parent is a and death.agent is a
    assert transition.product is b

    system = builder.build({'A': 10}, seed=1)
    assert system.count_agent(a) == 10
    assert system.total_rate == pytest.approx(20.0 + 5.0 + 10.0)


def test_model_builder_errors():
    builder = ModelBuilder()
    builder.add_agent('A')

    with pytest.raises(ValueError, match='Unknown agent'):
        builder.death('B', 1.0)

    with pytest.raises(ValueError):
        builder.add_process({'type': 'mutation', 'agent': 'A'})

    # An invalid transition is not registered and does not use an index
    with pytest.raises(ValueError):
        builder.transition('A', 'A', 1.0)
    assert builder.processes == []
    assert builder.death('A', 1.0).index == 0


def test_independent_builders():
    first = ModelBuilder()
    first.add_agent('A')
    first.death('A', 1.0)

    second = ModelBuilder()
    assert second.add_agent('A').index == 0
    assert second.death('A', 1.0).index == 0


def test_config_from_json():
    config = SimulationConfig.from_file(TEST_FILE_DIR / 'config.json')

    assert config.agents == ['A', 'B']
    assert config.initial_population == {'A': 10}
    assert config.seed == 20210501
    assert config.max_steps == 200
    assert config.max_time == 5.0
    assert config.record_populations is True

    system = config.build_system()
    assert [type(proc) for proc in system.processes] == [
        BirthProc, DeathProc, TransitionProc, DeathProc
    ]
    assert system.seed == 20210501
    assert system.total_rate == pytest.approx(20.0 + 5.0 + 2.5)

    assert config.build_system(seed=3).seed == 3


def test_config_from_yaml():
    config = SimulationConfig.from_file(TEST_FILE_DIR / 'capped.yaml')
    system = config.build_system()

    proc, = system.processes
    assert isinstance(proc, CappedProc)
    assert proc.capacity == 5
    assert proc.rate == pytest.approx(4.0)


def test_config_round_trip(tmp_path):
    config = SimulationConfig.from_file(TEST_FILE_DIR / 'config.json')
    config.to_file(tmp_path / 'config.json')

    loaded = SimulationConfig.from_file(tmp_path / 'config.json')
    assert isinstance(loaded, SimulationConfig)
    assert loaded.as_dict() == config.as_dict()


def test_systems_are_independent():
    config = SimulationConfig.from_file(TEST_FILE_DIR / 'config.json')
    first = config.build_system(seed=1)
    second = config.build_system(seed=1)

    first.run(max_steps=20)
    assert second.step_count == 0
    assert second.populations().tolist() == [10, 0]
    assert first.processes[0] is not second.processes[0]


def test_config_validation():
    with pytest.raises(ValueError):
        SimulationConfig(['A', 'A'], [])
    with pytest.raises(ValueError):
        SimulationConfig(['A'], [], initial_population={'B': 1})
    with pytest.raises(ValueError):
        SimulationConfig(['A'], [], initial_population={'A': -1})
    with pytest.raises(ValueError):
        SimulationConfig(['A'], [], max_steps=-1)
    with pytest.raises(ValueError):
        SimulationConfig(['A'], [], max_time=-1.0)

    config = SimulationConfig(['A'], [{'type': 'capped',
                                       'base': {'type': 'death', 'agent': 'A',
                                                'rate_constant': 1.0},
                                       'capped_agents': ['A'],
                                       'capacity': 0}])
    with pytest.raises(ValueError, match='Capacity'):
        config.build_system()
