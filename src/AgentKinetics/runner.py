import argparse
import logging
from typing import Dict, List, Optional

from AgentKinetics.database import TrajectoryRecorder
from AgentKinetics.inputs import SimulationConfig
from AgentKinetics.state import StochEvent


def get_parser():
    parser = argparse.ArgumentParser(
        description='Run replicas of a stochastic agent simulation')

    parser.add_argument('-c',
                        '--config',
                        help='A json or yaml file describing the model',
                        type=str,
                        required=True)
    parser.add_argument('-o',
                        '--output_file',
                        help='The sqlite database to write trajectories to',
                        type=str,
                        default='trajectories.sqlite')
    parser.add_argument('-n',
                        '--num_sims',
                        help='The number of replicas to run',
                        type=int,
                        default=1)
    parser.add_argument(
        '-s',
        '--base_seed',
        help=('The seed of the first replica. Replica i uses base_seed + i.'
              ' Defaults to the seed in the config, or 1000.'),
        type=int,
        default=None)
    parser.add_argument('--max_steps',
                        help='Overrides the step limit in the config',
                        type=int,
                        default=None)
    parser.add_argument('--max_time',
                        help='Overrides the time limit in the config',
                        type=float,
                        default=None)
    parser.add_argument('--no_populations',
                        help='Only record events, not populations',
                        action='store_true')
    parser.add_argument('-v',
                        '--verbose',
                        help='Log progress information',
                        action='store_true')
    return parser


def run_one(config: SimulationConfig,
            seed: int,
            database_file: Optional[str] = None,
            max_steps: Optional[int] = None,
            max_time: Optional[float] = None,
            record_populations: Optional[bool] = None) -> List[StochEvent]:
    """
    Runs a single replica from a config. If a database file is given, the
    model and trajectory are written to it.
    """
    max_steps = config.max_steps if max_steps is None else max_steps
    max_time = config.max_time if max_time is None else max_time
    if record_populations is None:
        record_populations = config.record_populations

    system = config.build_system(seed=seed)
    logging.info(f'Running replica {seed}')

    if database_file is None:
        events = system.run(max_steps=max_steps, max_time=max_time)
    else:
        with TrajectoryRecorder(database_file, seed,
                                record_populations=record_populations) as recorder:
            recorder.write_model(system)
            events = system.run(max_steps=max_steps,
                                max_time=max_time,
                                recorder=recorder)

    logging.info(f'Replica {seed} finished after {len(events)} events '
                 f'at time {system.time}')
    return events


def run_replicas(config: SimulationConfig,
                 database_file: Optional[str] = None,
                 num_sims: int = 1,
                 base_seed: Optional[int] = None,
                 **kwargs) -> Dict[int, List[StochEvent]]:
    """
    Runs independent replicas with seeds
    [base_seed, base_seed+1, ..., base_seed+num_sims-1].

    Returns:
        Dict[int, List[StochEvent]]: The events of each replica keyed by seed
    """
    if num_sims < 1:
        raise ValueError('num_sims must be positive')
    if base_seed is None:
        base_seed = 1000 if config.seed is None else config.seed

    trajectories = {}
    for seed in range(base_seed, base_seed + num_sims):
        trajectories[seed] = run_one(config, seed, database_file, **kwargs)
    return trajectories


def run_from_args(args: argparse.Namespace) -> Dict[int, List[StochEvent]]:
    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    config = SimulationConfig.from_file(args.config)
    record_populations = False if args.no_populations else None
    return run_replicas(config,
                        database_file=args.output_file,
                        num_sims=args.num_sims,
                        base_seed=args.base_seed,
                        max_steps=args.max_steps,
                        max_time=args.max_time,
                        record_populations=record_populations)


def main(args=None):
    run_from_args(get_parser().parse_args(args))


if __name__ == '__main__':
    main()
