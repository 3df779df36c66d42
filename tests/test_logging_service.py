"""
Tests for logging setup and attempt timing.
"""
import json
import logging
import os
import shutil
import tempfile
import unittest

from getcreds.services.logging_service import (
    LoggingService, JSONFormatter, PerformanceMonitor, LogEntry, PerformanceMetric
)


class TestJSONFormatter(unittest.TestCase):
    """Test JSON formatter for structured logging."""

    def setUp(self):
        """Set up test fixtures."""
        self.formatter = JSONFormatter()

    def test_format_basic_log_record(self):
        """Test formatting a basic log record."""
        logger = logging.getLogger('test')
        record = logger.makeRecord(
            name='test.module',
            level=logging.INFO,
            fn='test_file.py',
            lno=42,
            msg='Attempting candidate %d',
            args=(2,),
            exc_info=None
        )

        log_data = json.loads(self.formatter.format(record))

        self.assertIn('timestamp', log_data)
        self.assertEqual(log_data['level'], 'INFO')
        self.assertEqual(log_data['logger_name'], 'test.module')
        self.assertEqual(log_data['message'], 'Attempting candidate 2')
        self.assertEqual(log_data['line_number'], 42)
        self.assertIsNone(log_data['exception_info'])

    def test_format_with_extra_data(self):
        logger = logging.getLogger('test')
        record = logger.makeRecord(
            name='test', level=logging.INFO, fn='f.py', lno=1,
            msg='timed', args=(), exc_info=None,
            extra={'extra_data': {'base_url': 'https://ca1.example.com'}}
        )

        log_data = json.loads(self.formatter.format(record))

        self.assertEqual(log_data['extra_data'], {'base_url': 'https://ca1.example.com'})

    def test_format_with_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            exc_info = sys.exc_info()

        record = logging.getLogger('test').makeRecord(
            name='test', level=logging.ERROR, fn='f.py', lno=1,
            msg='failed', args=(), exc_info=exc_info
        )

        log_data = json.loads(self.formatter.format(record))

        self.assertEqual(log_data['exception_info']['type'], 'ValueError')
        self.assertEqual(log_data['exception_info']['message'], 'boom')

    def test_log_entry_fields(self):
        entry = LogEntry(
            timestamp='t', level='INFO', logger_name='n', message='m',
            module='mod', function='fn', line_number=1, process_id=2
        )
        self.assertIsNone(entry.extra_data)


class TestPerformanceMonitor(unittest.TestCase):
    """Test performance monitoring."""

    def setUp(self):
        self.monitor = PerformanceMonitor()

    def test_measure_successful_operation(self):
        with self.monitor.measure_operation('candidate_attempt', {'base_url': 'https://a'}):
            pass

        metrics = self.monitor.get_metrics()
        self.assertEqual(len(metrics), 1)
        self.assertIsInstance(metrics[0], PerformanceMetric)
        self.assertTrue(metrics[0].success)
        self.assertGreaterEqual(metrics[0].duration_ms, 0)
        self.assertEqual(metrics[0].extra_data, {'base_url': 'https://a'})

    def test_measure_failed_operation(self):
        with self.assertRaises(RuntimeError):
            with self.monitor.measure_operation('candidate_attempt'):
                raise RuntimeError("refused")

        metric = self.monitor.get_metrics('candidate_attempt')[0]
        self.assertFalse(metric.success)
        self.assertEqual(metric.error_message, "refused")

    def test_get_metrics_by_operation(self):
        with self.monitor.measure_operation('a'):
            pass
        with self.monitor.measure_operation('b'):
            pass

        self.assertEqual([m.operation for m in self.monitor.get_metrics('b')], ['b'])
        self.assertEqual(len(self.monitor.get_metrics()), 2)


class TestLoggingService(unittest.TestCase):
    """Test the logging service setup."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root_logger = logging.getLogger()
        self.saved_handlers = self.root_logger.handlers[:]
        self.saved_level = self.root_logger.level

    def tearDown(self):
        for handler in self.root_logger.handlers[:]:
            self.root_logger.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_console_only_setup(self):
        LoggingService(log_level="WARNING")

        self.assertEqual(self.root_logger.level, logging.WARNING)
        self.assertEqual(len(self.root_logger.handlers), 1)

    def test_file_log_writes_json(self):
        log_path = os.path.join(self.temp_dir, "logs", "getcreds.log")
        service = LoggingService(log_level="INFO", log_file_path=log_path)

        logging.getLogger("getcreds.test").info("Obtained certificates")
        for handler in self.root_logger.handlers:
            handler.flush()

        with open(log_path) as f:
            lines = [json.loads(line) for line in f if line.strip()]
        self.assertTrue(any(entry['message'] == "Obtained certificates" for entry in lines))
        self.assertEqual(service.log_file_path, log_path)

    def test_set_level(self):
        service = LoggingService(log_level="INFO")

        service.set_level("DEBUG")

        self.assertEqual(self.root_logger.level, logging.DEBUG)
        for handler in self.root_logger.handlers:
            self.assertEqual(handler.level, logging.DEBUG)

    def test_add_file_log_once(self):
        service = LoggingService(log_level="INFO")
        log_path = os.path.join(self.temp_dir, "extra.log")

        service.add_file_log(log_path)
        service.add_file_log(log_path)

        self.assertEqual(len(self.root_logger.handlers), 2)
        self.assertTrue(os.path.exists(log_path))

    def test_measure_performance(self):
        service = LoggingService(log_level="INFO")

        with service.measure_performance('keypair_generation'):
            pass

        self.assertEqual(len(service.performance_monitor.get_metrics('keypair_generation')), 1)


if __name__ == '__main__':
    unittest.main()
