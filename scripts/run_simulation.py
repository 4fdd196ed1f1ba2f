from AgentKinetics.runner import get_parser, run_from_args


if __name__ == "__main__":
    trajectories = run_from_args(get_parser().parse_args())

    for seed, events in trajectories.items():
        print(f'Seed {seed}: {len(events)} events')
