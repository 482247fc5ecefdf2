#!/usr/bin/env python
"""
Average case experiments on random binary search trees.

For a metric (height, leaves, compares of a successful or an unsuccessful
search) and a sweep of tree sizes, builds many random trees per size and
collects three series of (n, value) points: every sample, the average of the
samples, and the theoretical model. They are written as CSV for a plotting
tool.

    python bst_experiment.py height --trials 50 --stop 2000 -v > height.csv

"""

import argparse
import csv
import logging
import math
import random
import statistics
import sys

from random_bst import InvalidArgument, RandomBST

logger = logging.getLogger(__name__)

# Options that can be configured from the command line

SWEEP_START = 100
SWEEP_STOP = 10000

# Options that can only be configured by editing this file

# the model curves are sampled more finely than the experiments
DEFAULT_MODEL_STEP = 10
# ln(ln(n)) is undefined below 2
MODEL_MIN_N = 2


def harmonic(n):
    total = 0.0
    for i in range(1, n + 1):
        total += 1.0 / i
    return total


def height_model(n):
    # alpha*ln(N) - beta*ln(ln(N)) + O(1), alpha = 4.31107..., beta = 1.953...
    return 4.31107 * math.log(n) - 1.953 * math.log(math.log(n)) - 5


def leaves_model(n):
    return (n + 1) / 3.0


def successful_search_model(n):
    return 1.39 * math.log(n, 2) - 1.85


def successful_search_exact(n):
    h = harmonic(n)
    return 2 * (1 + 1.0 / n) * h - 3


def unsuccessful_search_model(n):
    return 1.39 * math.log(n, 2) - .846 + 2.0 / (n + 1)


def unsuccessful_search_exact(n):
    return 2 * harmonic(n + 1) - 2


class Metric(object):
    """ A statistic of a RandomBST, with its reference experiment settings

    """

    def __init__(self, name, label, statistic, trials, step, model,
                 exact_model=None, min_n=0):
        self.name = name
        self.label = label
        self.statistic = statistic
        self.trials = trials
        self.step = step
        self.model = model
        self.exact_model = exact_model
        self.min_n = min_n

    def measure(self, tree):
        return self.statistic(tree)

    def model_function(self, exact=False):
        if not exact:
            return self.model
        if self.exact_model is None:
            raise InvalidArgument('no exact model for %s' % self.name)
        return self.exact_model

    def __repr__(self):
        return 'Metric(%r)' % self.name


METRICS = {
    'height': Metric('height', 'Height', RandomBST.height,
                     trials=200, step=100, model=height_model),
    'leaves': Metric('leaves', 'Leaves', RandomBST.leaves,
                     trials=300, step=100, model=leaves_model),
    # search costs are undefined on empty trees
    'ss': Metric('ss', 'Compares for successful search',
                 RandomBST.successful_search_cost,
                 trials=500, step=200, model=successful_search_model,
                 exact_model=successful_search_exact, min_n=1),
    'us': Metric('us', 'Compares for unsuccessful search',
                 RandomBST.unsuccessful_search_cost,
                 trials=500, step=200, model=unsuccessful_search_model,
                 exact_model=unsuccessful_search_exact, min_n=1),
}


def get_metric(name):
    if isinstance(name, Metric):
        return name
    try:
        return METRICS[name.lower()]
    except KeyError:
        raise InvalidArgument('unknown metric %r, expected one of %s'
                              % (name, ', '.join(sorted(METRICS))))


class Series(object):
    """ An ordered list of (n, value) points

    """

    def __init__(self, name):
        self.name = name
        self.points = []

    def add(self, n, value):
        self.points.append((n, value))

    def xs(self):
        return [n for n, _ in self.points]

    def ys(self):
        return [value for _, value in self.points]

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)


class SweepResult(object):

    def __init__(self, metric, trials):
        self.metric = metric
        self.trials = trials
        self.average = Series('average')
        self.samples = Series('samples')
        self.model = Series('model')
        self.stdev = {}

    def series(self):
        return [self.average, self.samples, self.model]


def sweep_range(start, stop, step):
    """ Inclusive range of tree sizes

    """

    if start < 0:
        raise InvalidArgument('sweep start must not be negative, got %d' % start)
    if step <= 0:
        raise InvalidArgument('sweep step must be positive, got %d' % step)
    if stop < start:
        raise InvalidArgument('sweep stop %d is before its start %d' % (stop, start))
    return list(range(start, stop + 1, step))


def run_trials(metric, n, trials, rng):
    """
    Measures metric on trials random trees of n keys.

    Each tree owns a generator seeded from rng.

    """

    metric = get_metric(metric)
    if trials < 1:
        raise InvalidArgument('at least one trial is needed, got %d' % trials)

    values = []
    for _ in range(trials):
        tree = RandomBST(n, rng=random.Random(rng.getrandbits(64)))
        values.append(metric.measure(tree))
    return values


def model_series(metric, start, stop, step=DEFAULT_MODEL_STEP, exact=False):
    model = get_metric(metric).model_function(exact)
    series = Series('model')
    for n in range(max(start, MODEL_MIN_N), stop + 1, step):
        series.add(n, model(n))
    return series


def run_sweep(metric, ns=None, trials=None, seed=None, exact=False):
    """
    Runs the experiment of metric for each tree size of ns.

    Defaults to the reference sweep and trial count of the metric. Given the
    same seed, two sweeps produce the same samples.

    """

    metric = get_metric(metric)
    if ns is None:
        ns = sweep_range(SWEEP_START, SWEEP_STOP, metric.step)
    else:
        ns = list(ns)
    if not ns:
        raise InvalidArgument('empty sweep')
    if min(ns) < metric.min_n:
        raise InvalidArgument('%s needs trees of at least %d keys'
                              % (metric.name, metric.min_n))
    if trials is None:
        trials = metric.trials

    if trials < 1:
        raise InvalidArgument('at least one trial is needed, got %d' % trials)

    result = SweepResult(metric, trials)
    # fails on a missing exact model before the sweep starts
    result.model = model_series(metric, min(ns), max(ns), exact=exact)

    logger.debug('sweeping %s over %d sizes, %d trials each',
                 metric.name, len(ns), trials)

    rng = random.Random(seed)
    for n in ns:
        values = run_trials(metric, n, trials, rng)
        for value in values:
            result.samples.add(n, value)

        mean = statistics.mean(values)
        result.average.add(n, mean)
        result.stdev[n] = statistics.stdev(values) if len(values) > 1 else 0.0
        logger.info('%s n=%d: average %f over %d trials',
                    metric.name, n, mean, trials)

    return result


def write_csv(result, fp):
    """ Writes the series of result as 'series,n,value' rows

    """

    writer = csv.writer(fp)
    writer.writerow(['series', 'n', 'value'])
    for series in result.series():
        for n, value in series:
            writer.writerow([series.name, n, value])


def build_parser():
    parser = argparse.ArgumentParser(
        description='Average case experiments on random binary search trees.')
    parser.add_argument('metric', choices=sorted(METRICS),
                        help='the statistic to measure')
    parser.add_argument('--start', type=int, default=SWEEP_START,
                        help='smallest tree size (default: %(default)s)')
    parser.add_argument('--stop', type=int, default=SWEEP_STOP,
                        help='largest tree size (default: %(default)s)')
    parser.add_argument('--step', type=int, default=None,
                        help='tree size increment (default: the metric reference step)')
    parser.add_argument('--trials', type=int, default=None,
                        help='trees per size (default: the metric reference count)')
    parser.add_argument('--seed', type=int, default=None,
                        help='seed of the sweep, for reproducible samples')
    parser.add_argument('--exact', action='store_true',
                        help='use the harmonic number model (ss and us only)')
    parser.add_argument('-o', '--output', default=None,
                        help='CSV file to write (default: standard output)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='log progress, twice for debug output')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    metric = get_metric(args.metric)
    step = args.step if args.step is not None else metric.step

    try:
        ns = sweep_range(args.start, args.stop, step)
        result = run_sweep(metric, ns, trials=args.trials, seed=args.seed,
                           exact=args.exact)
    except InvalidArgument as e:
        sys.stderr.write('Error: %s\n' % e)
        return 1

    if args.output is None:
        write_csv(result, sys.stdout)
    else:
        with open(args.output, 'w', newline='') as f:
            write_csv(result, f)
        logger.info('wrote %s', args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
