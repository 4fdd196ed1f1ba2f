import logging
import sqlite3
from typing import Dict, List, Optional

create_agents_table_sql = """
    CREATE TABLE IF NOT EXISTS agents (
        agent_index         INTEGER NOT NULL PRIMARY KEY,
        name                TEXT NOT NULL
    );
"""

insert_agent_sql = """
    INSERT OR REPLACE INTO agents VALUES (?,?);
"""

create_processes_table_sql = """
    CREATE TABLE IF NOT EXISTS processes (
        proc_index          INTEGER NOT NULL PRIMARY KEY,
        description         TEXT NOT NULL
    );
"""

insert_process_sql = """
    INSERT OR REPLACE INTO processes VALUES (?,?);
"""

create_metadata_table_sql = """
    CREATE TABLE IF NOT EXISTS metadata (
        seed                INTEGER NOT NULL PRIMARY KEY,
        number_of_agents    INTEGER NOT NULL,
        number_of_processes INTEGER NOT NULL
    );
"""

insert_metadata_sql = """
    INSERT OR REPLACE INTO metadata VALUES (?,?,?);
"""

create_trajectories_table_sql = """
    CREATE TABLE IF NOT EXISTS trajectories (
        seed               INTEGER NOT NULL,
        step               INTEGER NOT NULL,
        time               REAL NOT NULL,
        proc_index         INTEGER NOT NULL
    );
"""

insert_trajectory_sql = """
    INSERT INTO trajectories VALUES (?,?,?,?);
"""

create_populations_table_sql = """
    CREATE TABLE IF NOT EXISTS populations (
        seed               INTEGER NOT NULL,
        step               INTEGER NOT NULL,
        time               REAL NOT NULL,
        agent_index        INTEGER NOT NULL,
        count              INTEGER NOT NULL
    );
"""

insert_population_sql = """
    INSERT INTO populations VALUES (?,?,?,?,?);
"""

sql_get_trajectory = """
    SELECT seed, step, time, proc_index FROM trajectories ORDER BY seed, step;
"""

sql_get_single_trajectory = """
    SELECT step, time, proc_index FROM trajectories WHERE seed=? ORDER BY step;
"""

sql_get_populations = """
    SELECT step, time, agent_index, count FROM populations
    WHERE seed=? ORDER BY step, agent_index;
"""


def create_tables(cur: sqlite3.Cursor):
    cur.execute(create_agents_table_sql)
    cur.execute(create_processes_table_sql)
    cur.execute(create_metadata_table_sql)
    cur.execute(create_trajectories_table_sql)
    cur.execute(create_populations_table_sql)


class TrajectoryRecorder():
    """
    Writes the events (and optionally the populations) of one simulation
    replica to a sqlite database. Rows are buffered and committed in
    batches; the simulation itself has no knowledge of the database.

    Args:
        database_file (str): The sqlite file to write to
        seed (int): The seed of the replica, used to key every row
        record_populations (bool): Whether to store the count of every
            agent after each event
        batch_size (int): The number of events to buffer before a commit
    """

    def __init__(self,
                 database_file: str,
                 seed: int,
                 record_populations: bool = True,
                 batch_size: int = 1000):
        if batch_size < 1:
            raise ValueError('batch_size must be positive')
        self.database_file = database_file
        self.seed = seed
        self.record_populations = record_populations
        self.batch_size = batch_size

        self._agents = []
        self._events = []
        self._populations = []
        self._con = sqlite3.connect(database_file)
        create_tables(self._con.cursor())
        self._con.commit()

    def write_model(self, system):
        """
        Stores the agents, processes and initial population of a system.
        The initial population is stored as step 0.
        """
        self._agents = list(system.agents)
        cur = self._con.cursor()
        cur.executemany(insert_agent_sql,
                        [(agent.index, agent.name) for agent in system.agents])
        cur.executemany(insert_process_sql,
                        [(proc.index, str(proc)) for proc in system.processes])
        cur.execute(insert_metadata_sql,
                    (self.seed, len(system.agents), len(system.processes)))
        self._con.commit()

        if self.record_populations:
            self._buffer_populations(system.state, 0, system.time)
            self.flush()

    def _buffer_populations(self, state, step: int, time: float):
        for agent in self._agents:
            self._populations.append(
                (self.seed, step, time, agent.index, state.count_agent(agent)))

    def record(self, state):
        event = state.last_event
        if event is None:
            return
        self._events.append((self.seed, event.step, event.time, event.proc_index))
        if self.record_populations:
            self._buffer_populations(state, event.step, event.time)

        if len(self._events) >= self.batch_size:
            self.flush()

    def flush(self):
        cur = self._con.cursor()
        if self._events:
            cur.executemany(insert_trajectory_sql, self._events)
        if self._populations:
            cur.executemany(insert_population_sql, self._populations)
        self._con.commit()
        logging.debug(f'Committed {len(self._events)} events for seed {self.seed}')
        self._events = []
        self._populations = []

    def close(self):
        self.flush()
        self._con.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


def load_trajectory(seed: int, database_file: str) -> List[List]:
    """
    Loads the events of one replica as [step, time, proc_index] rows.
    """
    with sqlite3.connect(database_file) as con:
        cur = con.cursor()
        trajectory = [list(row) for row in cur.execute(sql_get_single_trajectory, (seed, ))]

    if len(trajectory) == 0:
        raise ValueError("Invalid Seed")
    return trajectory


def load_trajectories(database_file: str) -> Dict[int, List[List]]:
    with sqlite3.connect(database_file) as con:
        cur = con.cursor()

        trajectories = {}
        for row in cur.execute(sql_get_trajectory):
            seed = row[0]
            step = row[1]
            _time = row[2]
            proc_index = row[3]

            if seed not in trajectories:
                trajectories[seed] = []

            trajectories[seed].append([step, _time, proc_index])

    return trajectories


def load_populations(seed: int,
                     database_file: str,
                     n_agents: Optional[int] = None):
    """
    Loads the recorded populations of one replica.

    Returns:
        Tuple[List[float], List[List[int]]]: The times and, for each time,
            the count of every agent ordered by agent index
    """
    times = []
    counts = []
    with sqlite3.connect(database_file) as con:
        cur = con.cursor()
        if n_agents is None:
            row = cur.execute(
                'SELECT number_of_agents FROM metadata WHERE seed=?',
                (seed, )).fetchone()
            if row is None:
                raise ValueError("Invalid Seed")
            n_agents = row[0]

        last_step = None
        for step, _time, agent_index, count in cur.execute(sql_get_populations, (seed, )):
            if step != last_step:
                times.append(_time)
                counts.append([0] * n_agents)
                last_step = step
            counts[-1][agent_index] = count

    return times, counts
