import csv
import io
import math
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from random import Random

import bst_experiment
from bst_experiment import (METRICS, Series, get_metric, harmonic, main,
                            model_series, run_sweep, run_trials, sweep_range,
                            write_csv)
from random_bst import EmptyTree, InvalidArgument, RandomBST


class TestModels(unittest.TestCase):

    def test_harmonic(self):
        self.assertEqual(0.0, harmonic(0))
        self.assertEqual(1.0, harmonic(1))
        self.assertAlmostEqual(1.5, harmonic(2))
        self.assertAlmostEqual(25.0 / 12, harmonic(4))

    def test_exact_models_on_one_node(self):
        self.assertAlmostEqual(1.0, bst_experiment.successful_search_exact(1))
        self.assertAlmostEqual(1.0, bst_experiment.unsuccessful_search_exact(1))

    def test_reference_models(self):
        self.assertAlmostEqual(101 / 3.0, bst_experiment.leaves_model(100))
        self.assertAlmostEqual(1.39 * math.log(1024, 2) - 1.85,
                               bst_experiment.successful_search_model(1024))
        self.assertAlmostEqual(
            4.31107 * math.log(100) - 1.953 * math.log(math.log(100)) - 5,
            bst_experiment.height_model(100))


class TestMetrics(unittest.TestCase):

    def test_reference_settings(self):
        self.assertEqual(200, METRICS['height'].trials)
        self.assertEqual(300, METRICS['leaves'].trials)
        self.assertEqual(500, METRICS['ss'].trials)
        self.assertEqual(500, METRICS['us'].trials)
        self.assertEqual(100, METRICS['leaves'].step)
        self.assertEqual(200, METRICS['us'].step)

    def test_lookup(self):
        self.assertIs(METRICS['height'], get_metric('HEIGHT'))
        self.assertIs(METRICS['ss'], get_metric(METRICS['ss']))
        with self.assertRaises(InvalidArgument):
            get_metric('width')

    def test_measure(self):
        tree = RandomBST(50, rng=Random(3))
        self.assertEqual(tree.height(), get_metric('height').measure(tree))
        self.assertEqual(tree.leaves(), get_metric('leaves').measure(tree))
        self.assertEqual(tree.unsuccessful_search_cost(),
                         get_metric('us').measure(tree))

    def test_no_exact_height_model(self):
        with self.assertRaises(InvalidArgument):
            METRICS['height'].model_function(exact=True)


class TestSweep(unittest.TestCase):

    def test_sweep_range(self):
        self.assertEqual([100, 200, 300], sweep_range(100, 300, 100))
        self.assertEqual([0], sweep_range(0, 0, 5))
        self.assertEqual([1, 3], sweep_range(1, 4, 2))

        for args in [(-1, 10, 1), (1, 10, 0), (10, 1, 1)]:
            with self.assertRaises(InvalidArgument):
                sweep_range(*args)

    def test_run_trials(self):
        values = run_trials('leaves', 30, 10, Random(1))
        self.assertEqual(10, len(values))
        for value in values:
            self.assertTrue(1 <= value <= 30)

        with self.assertRaises(InvalidArgument):
            run_trials('leaves', 30, 0, Random(1))

    def test_empty_trees_have_no_search_cost(self):
        with self.assertRaises(EmptyTree):
            run_trials('ss', 0, 1, Random(1))
        with self.assertRaises(InvalidArgument):
            run_sweep('us', [0, 10], trials=2, seed=1)

    def test_run_sweep(self):
        result = run_sweep('height', [10, 20, 30], trials=5, seed=12)

        self.assertEqual([10, 20, 30], result.average.xs())
        self.assertEqual(15, len(result.samples))
        self.assertEqual([10] * 5 + [20] * 5 + [30] * 5, result.samples.xs())
        for n, mean in result.average:
            values = [v for x, v in result.samples if x == n]
            self.assertAlmostEqual(sum(values) / 5.0, mean)
            self.assertTrue(result.stdev[n] >= 0.0)

        self.assertEqual(list(range(10, 31, 10)), result.model.xs())

    def test_run_sweep_is_reproducible(self):
        a = run_sweep('us', [50, 100], trials=4, seed=99)
        b = run_sweep('us', [50, 100], trials=4, seed=99)
        self.assertEqual(a.samples.points, b.samples.points)
        self.assertEqual(a.average.points, b.average.points)

    def test_single_trial(self):
        result = run_sweep('leaves', [5], trials=1, seed=0)
        self.assertEqual(0.0, result.stdev[5])
        self.assertEqual(result.samples.ys(), result.average.ys())

    def test_model_series(self):
        series = model_series('leaves', 0, 30)
        self.assertEqual([2, 12, 22], series.xs())
        self.assertEqual([1.0, 13 / 3.0, 23 / 3.0], series.ys())

        exact = model_series('ss', 1, 21, exact=True)
        self.assertEqual([2, 12], exact.xs())

        with self.assertRaises(InvalidArgument):
            run_sweep('leaves', [10], trials=1, exact=True)

    def test_write_csv(self):
        result = run_sweep('leaves', [10, 20], trials=2, seed=5)
        out = io.StringIO()
        write_csv(result, out)

        rows = list(csv.reader(io.StringIO(out.getvalue())))
        self.assertEqual(['series', 'n', 'value'], rows[0])
        names = [row[0] for row in rows[1:]]
        self.assertEqual(2, names.count('average'))
        self.assertEqual(4, names.count('samples'))
        self.assertEqual(len(result.model), names.count('model'))


class TestSeries(unittest.TestCase):

    def test_points(self):
        s = Series('average')
        self.assertEqual(0, len(s))

        s.add(1, 2.0)
        s.add(3, 4.0)
        self.assertEqual([(1, 2.0), (3, 4.0)], list(s))
        self.assertEqual([1, 3], s.xs())
        self.assertEqual([2.0, 4.0], s.ys())


class TestMain(unittest.TestCase):

    def test_stdout(self):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['leaves', '--start', '10', '--stop', '20',
                           '--step', '10', '--trials', '3', '--seed', '1'])
        self.assertEqual(0, status)
        rows = list(csv.reader(io.StringIO(out.getvalue())))
        self.assertEqual(['series', 'n', 'value'], rows[0])
        self.assertEqual(1 + 2 + 6 + 2, len(rows))

    def test_output_file(self):
        handle, path = tempfile.mkstemp(suffix='.csv')
        os.close(handle)
        self.addCleanup(os.remove, path)

        status = main(['ss', '--start', '100', '--stop', '100', '--trials', '2',
                       '--exact', '-o', path])
        self.assertEqual(0, status)
        with open(path, newline='') as f:
            rows = list(csv.reader(f))
        self.assertEqual(['samples', '100'], rows[3][:2])

    def test_invalid_sweep(self):
        err = io.StringIO()
        with redirect_stderr(err):
            status = main(['us', '--start', '0', '--stop', '10', '--trials', '1'])
        self.assertEqual(1, status)
        self.assertIn('Error:', err.getvalue())

    def test_unknown_metric(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(['width'])


if __name__ == '__main__':
    unittest.main()
