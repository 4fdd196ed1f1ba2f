from AgentKinetics.analysis.trajectory_replayer import (TrajectoryReplayer,
                                                        average_populations)
