"""Module catalog and role presets used to seed a school.
Keys are stable identifiers referenced by route gates and role presets; rename
only through a migration.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

# Sub-module / category gating the permission administration endpoints
ROLE_MANAGEMENT = 'role_management'
CATEGORY_VIEW = 'view'
CATEGORY_EDIT = 'edit'

# Every sub-module carries at least these categories: (key, name, type, display_order)
DEFAULT_CATEGORIES: List[Tuple[str, str, str, int]] = [
    (CATEGORY_VIEW, 'View', 'view', 1),
    (CATEGORY_EDIT, 'Edit', 'edit', 2),
]

# module_key -> (module_name, [(sub_module_key, sub_module_name, route_path), ...]) in display order
MODULE_CATALOG: Dict[str, Tuple[str, List[Tuple[str, str, str]]]] = {
    'student_management': ('Student Management', [
        ('add_student', 'Add Student', '/students/add'),
        ('student_directory', 'Student Directory', '/students/directory'),
        ('student_attendance', 'Student Attendance', '/students/attendance'),
        ('mark_attendance', 'Mark Attendance', '/students/mark-attendance'),
        ('bulk_import_students', 'Bulk Import Students', '/students/bulk-import'),
        ('student_siblings', 'Student Siblings', '/students/siblings'),
    ]),
    'fee_management': ('Fee Management', [
        ('fee_dashboard', 'Fee Dashboard', '/fees/dashboard'),
        ('fee_heads', 'Fee Heads', '/fees/fee-heads'),
        ('fee_structures', 'Fee Structures', '/fees/fee-structures'),
        ('fee_collection', 'Collect Payment', '/fees/collection'),
        ('fee_statements', 'Student Fee Statements', '/fees/statements'),
        ('discounts_fines', 'Discounts & Fines', '/fees/discounts-fines'),
        ('fee_reports', 'Fee Reports', '/fees/reports'),
    ]),
    'staff_management': ('Staff Management', [
        ('staff_directory', 'Staff Directory', '/staff/directory'),
        ('add_staff', 'Add Staff', '/staff/add'),
        ('bulk_staff_import', 'Bulk Staff Import', '/staff-management/bulk-import'),
        ('staff_attendance', 'Staff Attendance', '/staff-management/attendance'),
        (ROLE_MANAGEMENT, 'Role Management', '/role-management'),
    ]),
    'classes': ('Classes', [
        ('classes_overview', 'Classes Overview', '/classes/overview'),
        ('modify_classes', 'Modify Classes', '/classes/modify'),
        ('subject_teachers', 'Subject Teachers', '/classes/subject-teachers'),
    ]),
    'timetable': ('Timetable', [
        ('class_timetable', 'Class Timetable', '/timetable/class'),
        ('teacher_timetable', 'Teacher Timetable', '/timetable/teacher'),
    ]),
    'event_calendar': ('Event/Calendar', [
        ('academic_calendar', 'Academic Calendar', '/calendar/academic'),
        ('events', 'Events', '/calendar/events'),
    ]),
    'examination': ('Examination', [
        ('examination_dashboard', 'Examination Dashboard', '/examinations/dashboard'),
        ('create_examination', 'Create Examination', '/examinations/create'),
        ('report_card', 'Report Card', '/examinations/report-card'),
    ]),
    'marks': ('Marks', [
        ('marks_dashboard', 'Marks Dashboard', '/marks'),
        ('marks_entry', 'Mark Entry', '/marks-entry'),
    ]),
    'transport': ('Transport', [
        ('transport_dashboard', 'Transport Dashboard', '/transport/dashboard'),
        ('vehicles', 'Vehicles', '/transport/vehicles'),
        ('routes', 'Routes', '/transport/routes'),
        ('student_route_mapping', 'Student Route Mapping', '/transport/route-students'),
    ]),
    'leave_management': ('Leave Management', [
        ('student_leave', 'Student Leave', '/leave/student-leave'),
        ('staff_leave', 'Staff Leave', '/leave/staff-leave'),
    ]),
    'communication': ('Communication', [
        ('communication_main', 'Communication', '/communication'),
    ]),
    'attendance': ('Attendance', [
        ('attendance_staff', 'Staff Attendance', '/attendance/staff'),
    ]),
}

# role name -> [(sub_module_key, category_key, view, edit)]; '*' grants every pair view+edit
ROLE_PRESETS: Dict[str, List[Tuple[str, str, bool, bool]]] = {
    'Teacher': [
        ('student_directory', CATEGORY_VIEW, True, False),
        ('mark_attendance', CATEGORY_VIEW, True, False),
        ('mark_attendance', CATEGORY_EDIT, True, True),
        ('class_timetable', CATEGORY_VIEW, True, False),
        ('marks_entry', CATEGORY_VIEW, True, False),
        ('marks_entry', CATEGORY_EDIT, True, True),
    ],
    'Accountant': [
        ('fee_dashboard', CATEGORY_VIEW, True, False),
        ('fee_collection', CATEGORY_VIEW, True, False),
        ('fee_collection', CATEGORY_EDIT, True, True),
        ('fee_reports', CATEGORY_VIEW, True, False),
    ],
    'Transport Manager': [
        ('transport_dashboard', CATEGORY_VIEW, True, False),
        ('vehicles', CATEGORY_EDIT, True, True),
        ('routes', CATEGORY_EDIT, True, True),
    ],
    'Administrator': [('*', '*', True, True)],
}


def all_pair_keys() -> List[Tuple[str, str]]:
    return [
        (sm_key, cat_key)
        for _, subs in MODULE_CATALOG.values()
        for sm_key, _, _ in subs
        for cat_key, _, _, _ in DEFAULT_CATEGORIES
    ]
