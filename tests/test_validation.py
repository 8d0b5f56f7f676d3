"""Tests for request validators"""
import os
import sys
import unittest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.validation import (
    MAX_PROMPT_LENGTH,
    is_allowed_image_url,
    validate_dimensions,
    validate_prompt,
    validate_scale,
    validate_steps,
)


class TestPromptValidation(unittest.TestCase):

    def test_valid_prompt(self):
        self.assertTrue(validate_prompt("a valid prompt").valid)

    def test_empty_prompt(self):
        verdict = validate_prompt("")
        self.assertFalse(verdict.valid)
        self.assertEqual(verdict.error, "Prompt is required")

    def test_whitespace_prompt(self):
        self.assertFalse(validate_prompt("   \n\t").valid)

    def test_missing_or_non_string_prompt(self):
        self.assertFalse(validate_prompt(None).valid)
        self.assertFalse(validate_prompt(123).valid)

    def test_max_length_boundary(self):
        self.assertEqual(MAX_PROMPT_LENGTH, 4000)
        self.assertTrue(validate_prompt("a" * MAX_PROMPT_LENGTH).valid)
        verdict = validate_prompt("a" * (MAX_PROMPT_LENGTH + 1))
        self.assertFalse(verdict.valid)
        self.assertIn("4000", verdict.error)

    def test_custom_max_length(self):
        self.assertFalse(validate_prompt("abcdef", max_length=5).valid)


class TestDimensionValidation(unittest.TestCase):

    def test_valid_square(self):
        self.assertTrue(validate_dimensions(1024, 1024).valid)

    def test_misaligned_width(self):
        verdict = validate_dimensions(1023, 1024)
        self.assertFalse(verdict.valid)
        self.assertIn("Width", verdict.error)
        self.assertIn("multiple of 8", verdict.error)

    def test_zero_width(self):
        verdict = validate_dimensions(0, 1024)
        self.assertFalse(verdict.valid)
        self.assertIn("Width", verdict.error)

    def test_height_out_of_range(self):
        verdict = validate_dimensions(1024, 4096)
        self.assertFalse(verdict.valid)
        self.assertIn("Height", verdict.error)

    def test_bounds_are_inclusive(self):
        self.assertTrue(validate_dimensions(256, 2048).valid)
        self.assertFalse(validate_dimensions(248, 1024).valid)
        self.assertFalse(validate_dimensions(1024, 2056).valid)

    def test_non_integer_dimensions(self):
        self.assertFalse(validate_dimensions("1024", 1024).valid)
        self.assertFalse(validate_dimensions(1024.5, 1024).valid)
        self.assertFalse(validate_dimensions(True, 1024).valid)
        self.assertFalse(validate_dimensions(float("nan"), 1024).valid)

    def test_whole_number_floats_accepted(self):
        self.assertTrue(validate_dimensions(1024.0, 512.0).valid)
        self.assertTrue(validate_steps(9.0).valid)
        self.assertTrue(validate_scale(4.0).valid)

    def test_custom_alignment(self):
        self.assertFalse(validate_dimensions(1000, 1024, alignment=64).valid)
        self.assertTrue(validate_dimensions(960, 1024, alignment=64).valid)


class TestStepsValidation(unittest.TestCase):

    def test_range(self):
        self.assertTrue(validate_steps(1).valid)
        self.assertTrue(validate_steps(50).valid)
        self.assertFalse(validate_steps(0).valid)
        self.assertFalse(validate_steps(51).valid)

    def test_non_integer(self):
        self.assertFalse(validate_steps(9.5).valid)
        self.assertFalse(validate_steps("9").valid)


class TestScaleValidation(unittest.TestCase):

    def test_allowed_set(self):
        self.assertTrue(validate_scale(2).valid)
        self.assertTrue(validate_scale(4).valid)

    def test_values_outside_set(self):
        for scale in (1, 3, 8, 2.5, "4"):
            with self.subTest(scale=scale):
                verdict = validate_scale(scale)
                self.assertFalse(verdict.valid)
                self.assertEqual(verdict.error, "Scale must be one of 2, 4")


class TestImageUrlAllowList(unittest.TestCase):
    HOSTS = ("hf.space", "huggingface.co")

    def test_allowed_hosts(self):
        self.assertTrue(is_allowed_image_url("https://some-space.hf.space/file=/tmp/a.png", self.HOSTS))
        self.assertTrue(is_allowed_image_url("https://huggingface.co/a.png", self.HOSTS))

    def test_lookalike_hosts_rejected(self):
        self.assertFalse(is_allowed_image_url("https://evilhf.space/a.png", self.HOSTS))
        self.assertFalse(is_allowed_image_url("https://hf.space.evil.com/a.png", self.HOSTS))
        self.assertFalse(is_allowed_image_url("https://evil.com/?u=huggingface.co", self.HOSTS))

    def test_non_http_schemes_rejected(self):
        self.assertFalse(is_allowed_image_url("file:///etc/passwd", self.HOSTS))
        self.assertFalse(is_allowed_image_url("ftp://x.hf.space/a.png", self.HOSTS))

    def test_garbage_rejected(self):
        self.assertFalse(is_allowed_image_url("not a url", self.HOSTS))
        self.assertFalse(is_allowed_image_url(None, self.HOSTS))


if __name__ == '__main__':
    unittest.main()
