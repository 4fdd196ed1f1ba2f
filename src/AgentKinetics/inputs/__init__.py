from AgentKinetics.inputs.config import (ModelBuilder, SimulationConfig,
                                         PROCESS_TYPES)
