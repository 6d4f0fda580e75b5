import math
import os
import unittest
import warnings
from unittest import mock

import numpy as np

import densemat
from densemat import Matrix
from densemat._internal import ops as _ops


def _m(rows):
    return Matrix.from_rows(rows)


class _OperationCases:
    KERNEL = "numpy"

    def setUp(self):
        densemat.set_kernel(self.KERNEL)
        self.addCleanup(densemat.reset_config)
        self.a = _m([[1, 2], [3, 4]])
        self.b = _m([[5, 6], [7, 8]])

    # Elementwise -----------------------------------------------------------

    def test_matrix_addition(self):
        self.assertEqual(self.a + self.b, _m([[6, 8], [10, 12]]))
        self.assertEqual(self.a.add(self.b), densemat.add(self.a, self.b))

    def test_matrix_subtraction(self):
        self.assertEqual(self.b - self.a, _m([[4, 4], [4, 4]]))
        self.assertEqual(self.b.subtract(self.a), _m([[4, 4], [4, 4]]))

    def test_elementwise_shape_preserved(self):
        x = Matrix(3, 2, range(6))
        y = Matrix(3, 2, range(6, 12))
        self.assertEqual((x + y).shape, (3, 2))
        self.assertEqual((x - y).shape, (3, 2))

    def test_addition_shape_mismatch(self):
        c = Matrix(2, 3, range(6))
        with self.assertRaises(densemat.ShapeMismatchError) as ctx:
            self.a + c
        err = ctx.exception
        self.assertEqual(err.operation, "addition")
        self.assertEqual(err.left_shape, (2, 2))
        self.assertEqual(err.right_shape, (2, 3))
        self.assertIn("2x2 + 2x3", str(err))

    def test_subtraction_shape_mismatch(self):
        with self.assertRaises(densemat.ShapeMismatchError) as ctx:
            self.a - Matrix(1, 2, [1, 2])
        self.assertEqual(ctx.exception.operation, "subtraction")
        self.assertIn("2x2 - 1x2", str(ctx.exception))

    # Scalar broadcasting -----------------------------------------------------

    def test_scalar_addition_commutes(self):
        self.assertEqual(self.a + 1.5, _m([[2.5, 3.5], [4.5, 5.5]]))
        self.assertEqual(1.5 + self.a, self.a + 1.5)
        self.assertEqual(densemat.add(2, self.a), densemat.add(self.a, 2))

    def test_matrix_minus_scalar(self):
        self.assertEqual(self.a - 1, _m([[0, 1], [2, 3]]))

    def test_scalar_minus_matrix_matches_matrix_minus_scalar(self):
        self.assertEqual(10 - self.a, self.a - 10)
        self.assertEqual(10 - self.a, _m([[-9, -8], [-7, -6]]))
        self.assertNotEqual(10 - self.a, (self.a - 10) * -1)
        self.assertEqual(densemat.subtract(10, self.a), self.a - 10)

    def test_numpy_scalar_operands_defer_to_matrix(self):
        result = np.float64(10.0) - self.a
        self.assertIsInstance(result, Matrix)
        self.assertEqual(result, self.a - 10)
        self.assertIsInstance(np.float64(2.0) * self.a, Matrix)

    def test_scalar_multiplication_commutes(self):
        self.assertEqual(self.a * 3, _m([[3, 6], [9, 12]]))
        self.assertEqual(3 * self.a, self.a * 3)
        self.assertEqual(self.a.scale(3), self.a * 3)

    def test_division_by_scalar(self):
        self.assertEqual(self.a / 2, _m([[0.5, 1], [1.5, 2]]))
        self.assertEqual(self.a.divide(2), self.a / 2)

    def test_division_identity(self):
        x = Matrix(2, 3, [1.0, -2.5, 3.3, 7.0, 0.0, 1e-3])
        for s in (3.0, -7.0, 0.1, 1e6):
            self.assertTrue(((x / s) * s).allclose(x))

    def test_division_by_zero_follows_ieee(self):
        x = _m([[1, -1], [0, 2]])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = x / 0
        self.assertEqual(result[0, 0], math.inf)
        self.assertEqual(result[0, 1], -math.inf)
        self.assertTrue(math.isnan(result[1, 0]))

    def test_scalar_divided_by_matrix(self):
        self.assertEqual(12 / self.a, _m([[12, 6], [4, 3]]))
        self.assertEqual(self.a.reciprocal_divide(12), 12 / self.a)
        self.assertEqual(densemat.reciprocal_divide(12, self.a), 12 / self.a)

    def test_scalar_divided_by_zero_element(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = 1 / _m([[0, 4]])
        self.assertEqual(result[0, 0], math.inf)
        self.assertEqual(result[0, 1], 0.25)

    # Products ----------------------------------------------------------------

    def test_matrix_product(self):
        expected = _m([[19, 22], [43, 50]])
        self.assertEqual(self.a * self.b, expected)
        self.assertEqual(self.a @ self.b, expected)
        self.assertEqual(self.a.multiply(self.b), expected)
        self.assertEqual(densemat.matmul(self.a, self.b), expected)

    def test_product_shape_rule(self):
        x = Matrix(2, 3, [1, 2, 3, 4, 5, 6])
        y = Matrix(3, 4, range(12))
        z = x * y
        self.assertEqual(z.shape, (2, 4))
        for i in range(2):
            for j in range(4):
                expected = sum(x[i, k] * y[k, j] for k in range(3))
                self.assertEqual(z[i, j], expected)

    def test_product_matches_numpy(self):
        rng = np.random.default_rng(0)
        left = rng.standard_normal((5, 7))
        right = rng.standard_normal((7, 3))
        z = Matrix.from_numpy(left) * Matrix.from_numpy(right)
        np.testing.assert_allclose(z.to_numpy(), left @ right, rtol=1e-12, atol=1e-12)

    def test_product_with_empty_inner_dimension(self):
        z = Matrix(2, 0, []) * Matrix(0, 3, [])
        self.assertEqual(z, Matrix(2, 3, [0.0] * 6))

    def test_product_with_empty_outer_dimension(self):
        self.assertEqual((Matrix(0, 2, []) * Matrix(2, 3, range(6))).shape, (0, 3))
        self.assertEqual((Matrix(2, 2, range(4)) * Matrix(2, 0, [])).shape, (2, 0))

    def test_product_shape_mismatch(self):
        with self.assertRaises(densemat.ShapeMismatchError) as ctx:
            Matrix(2, 3, range(6)) * Matrix(2, 3, range(6))
        err = ctx.exception
        self.assertEqual(err.operation, "multiplication")
        self.assertIn("2x3 * 2x3", str(err))
        with self.assertRaises(ValueError):
            Matrix(2, 3, range(6)) @ Matrix(2, 3, range(6))

    # Transpose ---------------------------------------------------------------

    def test_transpose(self):
        self.assertEqual(self.a.transpose(), _m([[1, 3], [2, 4]]))
        self.assertEqual(self.a.T, densemat.transpose(self.a))

    def test_transpose_rectangular(self):
        x = Matrix(2, 3, range(6))
        t = x.transpose()
        self.assertEqual(t.shape, (3, 2))
        for r in range(2):
            for c in range(3):
                self.assertEqual(t[c, r], x[r, c])

    def test_transpose_involution(self):
        for x in (self.a, Matrix(2, 3, range(6)), Matrix(0, 0, []), Matrix(4, 0, [])):
            self.assertEqual(x.transpose().transpose(), x)

    def test_transpose_degenerate_shapes(self):
        self.assertEqual(Matrix(4, 0, []).transpose().shape, (0, 4))
        self.assertEqual(Matrix(0, 0, []).transpose().shape, (0, 0))

    # Purity ------------------------------------------------------------------

    def test_operands_are_not_mutated(self):
        a_before = self.a.tolist()
        b_before = self.b.tolist()
        _ = self.a + self.b
        _ = self.a - 2
        _ = self.a * self.b
        _ = 3 / self.a
        _ = self.a.transpose()
        self.assertEqual(self.a.tolist(), a_before)
        self.assertEqual(self.b.tolist(), b_before)

    def test_results_are_new_instances(self):
        self.assertIsNot(self.a + 0, self.a)
        self.assertIsNot(self.a * 1, self.a)

    # Missing and unsupported operands ------------------------------------------

    def test_missing_operands(self):
        for fn in (
            lambda: self.a + None,
            lambda: None + self.a,
            lambda: self.a - None,
            lambda: None - self.a,
            lambda: self.a * None,
            lambda: None * self.a,
            lambda: self.a @ None,
            lambda: self.a / None,
            lambda: None / self.a,
            lambda: densemat.matmul(None, self.a),
            lambda: densemat.transpose(None),
            lambda: densemat.reciprocal_divide(2.0, None),
        ):
            with self.assertRaises(densemat.MissingArgumentError):
                fn()

    def test_missing_operand_is_also_a_type_error(self):
        with self.assertRaises(TypeError):
            self.a + None

    def test_unsupported_operands(self):
        with self.assertRaises(TypeError):
            self.a + "1"
        with self.assertRaises(TypeError):
            self.a / self.b
        with self.assertRaises(TypeError):
            self.a @ 2
        with self.assertRaises(TypeError):
            self.a * True
        with self.assertRaises(TypeError):
            densemat.add(1, 2)


class TestOperationsNumpyKernel(_OperationCases, unittest.TestCase):
    KERNEL = "numpy"


class TestOperationsPythonKernel(_OperationCases, unittest.TestCase):
    KERNEL = "python"


class TestKernelAgreement(unittest.TestCase):
    def setUp(self):
        self.addCleanup(densemat.reset_config)
        rng = np.random.default_rng(42)
        self.x = Matrix.from_numpy(rng.standard_normal((6, 4)))
        self.y = Matrix.from_numpy(rng.standard_normal((4, 5)))

    def _both(self, fn):
        with densemat.use_kernel("numpy"):
            fast = fn()
        with densemat.use_kernel("python"):
            slow = fn()
        return fast, slow

    def test_product_agrees(self):
        fast, slow = self._both(lambda: self.x * self.y)
        self.assertTrue(fast.allclose(slow, rtol=1e-12, atol=1e-12))

    def test_elementwise_agrees_exactly(self):
        for fn in (
            lambda: self.x + self.x,
            lambda: self.x - 0.25,
            lambda: self.x * 3.0,
            lambda: self.x / 7.0,
            lambda: 2.0 / self.x,
            lambda: self.x.transpose(),
        ):
            fast, slow = self._both(fn)
            self.assertEqual(fast, slow)


class TestPythonKernelPerformanceWarning(unittest.TestCase):
    def setUp(self):
        self.addCleanup(densemat.reset_config)

    def test_large_python_product_warns(self):
        a = Matrix(2, 2, [1, 2, 3, 4])
        with mock.patch.object(_ops, "PYTHON_MATMUL_WARN_FLOPS", 7):
            with densemat.use_kernel("python"):
                with warnings.catch_warnings(record=True) as w:
                    warnings.simplefilter("always")
                    result = a * a
        hits = [item for item in w if issubclass(item.category, densemat.DenseMatPerformanceWarning)]
        self.assertEqual(len(hits), 1)
        self.assertEqual(result, Matrix(2, 2, [7, 10, 15, 22]))

    def test_warning_points_at_calling_line(self):
        a = Matrix(2, 2, [1, 2, 3, 4])
        calls = {
            "operator_mul": lambda: a * a,
            "operator_matmul": lambda: a @ a,
            "module_matmul": lambda: densemat.matmul(a, a),
            "module_multiply": lambda: densemat.multiply(a, a),
            "method_multiply": lambda: a.multiply(a),
        }
        for name, call in calls.items():
            with self.subTest(call=name):
                with mock.patch.object(_ops, "PYTHON_MATMUL_WARN_FLOPS", 7):
                    with densemat.use_kernel("python"):
                        with warnings.catch_warnings(record=True) as w:
                            warnings.simplefilter("always")
                            call()
                hits = [item for item in w if issubclass(item.category, densemat.DenseMatPerformanceWarning)]
                self.assertEqual(len(hits), 1)
                self.assertEqual(os.path.abspath(hits[0].filename), os.path.abspath(__file__))

    def test_numpy_product_does_not_warn(self):
        a = Matrix(2, 2, [1, 2, 3, 4])
        with mock.patch.object(_ops, "PYTHON_MATMUL_WARN_FLOPS", 0):
            with densemat.use_kernel("numpy"):
                with warnings.catch_warnings(record=True) as w:
                    warnings.simplefilter("always")
                    a * a
        self.assertEqual(len(w), 0)


if __name__ == "__main__":
    unittest.main()
