"""Human-readable descriptions of every algorithm and metric.

Display-only data for the console; the engines never read it.
"""

CONCEPT_CARDS = {
    'FCFS': {
        'title': 'First Come First Serve',
        'concept': ('Processes execute in the exact order they arrive. The first process to arrive '
                    'gets the CPU and runs until completion.'),
        'pros': ['Simplest to understand and implement', 'No starvation', 'Minimal overhead'],
        'cons': ['Convoy effect: one long process delays all short ones behind it',
                 'Poor average waiting time', 'Unresponsive to urgent tasks'],
        'example': 'Bank teller queue: customers are served in arrival order.',
        'preemptive': False,
    },
    'SJF': {
        'title': 'Shortest Job First (Non-Preemptive)',
        'concept': ('Always pick the process with the shortest total burst time. Once started, it '
                    'runs to completion.'),
        'pros': ['Optimal average waiting time among non-preemptive policies', 'Short jobs finish fast'],
        'cons': ['Long processes can starve', 'Needs burst times in advance'],
        'example': 'Express checkout lane.',
        'preemptive': False,
    },
    'SRTF': {
        'title': 'Shortest Remaining Time First',
        'concept': ('Preemptive SJF. A newly ready process with a shorter remaining time takes the '
                    'CPU immediately.'),
        'pros': ['Lowest average waiting time', 'Very responsive to short jobs'],
        'cons': ['Many context switches', 'Severe starvation for long processes'],
        'example': 'Triage where the patient closest to discharge is treated first.',
        'preemptive': True,
    },
    'PRIORITY': {
        'title': 'Priority Scheduling (Preemptive)',
        'concept': ('The process with the lowest priority number runs first and is interrupted only '
                    'by a strictly more urgent arrival.'),
        'pros': ['Critical work runs first', 'Flexible'],
        'cons': ['Low priority processes may starve', 'Priority inversion'],
        'example': 'Emergency room: priority 1 is seen before priority 5.',
        'preemptive': True,
    },
    'RR': {
        'title': 'Round Robin',
        'concept': ('Each process gets a fixed quantum. When it expires the process goes to the back '
                    'of the queue.'),
        'pros': ['Fair rotation', 'Good response time', 'No starvation'],
        'cons': ['Context switch overhead with small quanta', 'Large quanta degrade into FCFS'],
        'example': 'Turn-based game with a fixed time per turn.',
        'preemptive': True,
    },
    'FIRST_FIT': {
        'title': 'First Fit',
        'concept': 'Take the first free hole, in address order, that is large enough.',
        'pros': ['Fast scan'],
        'cons': ['Small leftover holes pile up near the start of memory'],
        'example': 'Parking in the first empty spot you see.',
        'preemptive': None,
    },
    'BEST_FIT': {
        'title': 'Best Fit',
        'concept': 'Take the smallest free hole that is large enough.',
        'pros': ['Keeps large holes intact'],
        'cons': ['Leaves tiny unusable slivers', 'Scans every hole'],
        'example': 'Choosing the smallest box the item fits in.',
        'preemptive': None,
    },
    'WORST_FIT': {
        'title': 'Worst Fit',
        'concept': 'Take the largest free hole so the remainder stays usable.',
        'pros': ['Leftover holes stay large'],
        'cons': ['Quickly consumes the big holes'],
        'example': 'Always cutting from the biggest sheet.',
        'preemptive': None,
    },
    'FIFO': {
        'title': 'FIFO Page Replacement',
        'concept': 'Evict the page that was loaded earliest, regardless of use.',
        'pros': ['Trivial bookkeeping'],
        'cons': ["Belady's anomaly: more frames can mean more faults"],
        'example': 'Oldest milk carton goes first.',
        'preemptive': None,
    },
    'LRU': {
        'title': 'Least Recently Used',
        'concept': 'Evict the page whose last access is the oldest.',
        'pros': ['Good approximation of optimal', "No Belady's anomaly"],
        'cons': ['Needs recency tracking on every access'],
        'example': 'Clearing the desk of the papers untouched the longest.',
        'preemptive': None,
    },
    'OPTIMAL': {
        'title': 'Optimal (Belady)',
        'concept': 'Evict the page whose next use lies farthest in the future.',
        'pros': ['Fewest possible faults'],
        'cons': ['Requires knowing the future reference stream'],
        'example': 'A benchmark other policies are measured against.',
        'preemptive': None,
    },
}

METRIC_EXPLANATIONS = {
    'AT': {'name': 'Arrival Time', 'formula': 'Given in input',
           'meaning': 'When the process enters the system.'},
    'BT': {'name': 'Burst Time', 'formula': 'Given in input',
           'meaning': 'Total CPU time the process needs.'},
    'CT': {'name': 'Completion Time', 'formula': 'Clock at termination',
           'meaning': 'When the process finished its last unit of work.'},
    'TAT': {'name': 'Turnaround Time', 'formula': 'TAT = CT - AT',
            'meaning': 'Total time spent in the system.'},
    'WT': {'name': 'Waiting Time', 'formula': 'WT = TAT - BT',
           'meaning': 'Time spent in the ready queue without running.'},
}


def get_card(name):
    key = str(name).strip().upper().replace('-', '_')
    return CONCEPT_CARDS.get(key)
