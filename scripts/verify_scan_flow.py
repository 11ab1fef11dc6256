"""Walk one scan session through PIN gating, printing each step"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hospiscanner.services.sessioncontroller import ScanSessionController

print('SCAN FLOW VERIFICATION')
print('='*60)

controller = ScanSessionController()
controller.subscribe(lambda snap: print(f'   -> v{snap.version} phase={snap.phase.value} error={snap.last_error}'))

print('1. Plain payload, no identifier:')
result = controller.submit_scanned_text('{"name":"John","age":30}')
print('   requires_verification:', result.requires_verification, '(should be False)')
print('   display:')
print(result.display_text)
controller.reset()
print()

print('2. Payload with DNI:')
controller.submit_scanned_text('{"name":"Jane","dni":"123456789"}')
print('   wrong PIN accepted:', controller.verify_pin('000000'), '(should be False)')
print('   right PIN accepted:', controller.verify_pin('123456'), '(should be True)')
controller.reset()
print()

print('3. Not JSON:')
controller.submit_scanned_text('not json at all')
print('   still scanning:', controller.is_scanning_active, '(should be True)')
print()

print('='*60)
print('DONE')
